"""Self-service upload and download diagnostics for BOS object storage."""

__version__ = "1.0.0"

__all__ = ["__version__"]
