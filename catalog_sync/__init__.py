"""Catalog Sync - client-side product catalog synchronization engine."""

__version__ = "0.1.0"
