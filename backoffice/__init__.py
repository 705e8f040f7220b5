"""Back-office authorization and optimistic-concurrency control plane."""

__version__ = "1.0.0"
