"""Document full-text search with a TTL result cache."""

__version__ = "0.1.0"
