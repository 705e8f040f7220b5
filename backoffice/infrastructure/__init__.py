"""Infrastructure layer - database, cache, security and configuration adapters."""
