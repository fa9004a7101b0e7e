"""Core module - catalog state, cache, fetch orchestration and intents."""

from catalog_sync.core.catalog_controller import CatalogController
from catalog_sync.core.catalog_state import CatalogState
from catalog_sync.core.errors import (
    CacheError,
    CatalogError,
    ErrorKind,
    NetworkError,
    ValidationError,
)
from catalog_sync.core.fetch_orchestrator import FetchOrchestrator
from catalog_sync.core.persistence import StatePersistor
from catalog_sync.core.search_debouncer import SearchDebouncer
from catalog_sync.core.ttl_cache import TTLCache

__all__ = [
    "CacheError",
    "CatalogController",
    "CatalogError",
    "CatalogState",
    "ErrorKind",
    "FetchOrchestrator",
    "NetworkError",
    "SearchDebouncer",
    "StatePersistor",
    "TTLCache",
    "ValidationError",
]
