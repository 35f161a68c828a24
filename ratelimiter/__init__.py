"""Per-identity rate limiting service backed by a shared key-value store."""

__version__ = "0.1.0"
