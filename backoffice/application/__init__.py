"""Application layer - use-case services orchestrating domain rules and stores."""
