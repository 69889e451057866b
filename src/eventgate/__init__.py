"""Analytics event ingest service."""

__version__ = "0.1.0"
