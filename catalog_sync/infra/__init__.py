"""Infrastructure - key-value storage and logging."""

from catalog_sync.infra.logging import get_logger, intent_context, setup_logging
from catalog_sync.infra.storage import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    create_store,
)

__all__ = [
    "FileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "create_store",
    "setup_logging",
    "get_logger",
    "intent_context",
]
