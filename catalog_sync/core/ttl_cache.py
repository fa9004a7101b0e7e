"""TTL cache over a key-value store.

Values are wrapped in a ``{"data": ..., "stored_at": ...}`` envelope and
serialized to JSON. Expired or unreadable entries read as a miss; they are
only deleted by ``purge_expired``, which runs once at startup.

The cache is an optimization: backend and serialization failures are
logged and reported as a miss or a no-op write, never raised.
"""

import time
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from catalog_sync.core.errors import CacheError
from catalog_sync.infra.logging import get_logger
from catalog_sync.infra.storage import KeyValueStore

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_PREFIX = "@ProductsCache_"


class CacheEntry(BaseModel):
    """Stored envelope. ``stored_at`` is seconds since the epoch."""

    data: Any
    stored_at: float


class TTLCache:
    """Generic key -> JSON value cache with expiry."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        prefix: str = DEFAULT_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Backing key-value store
            ttl_seconds: Entry lifetime; entries older than this read as absent
            prefix: Namespace prepended to every key in the store
            clock: Returns the current time in seconds (injectable for tests)
        """
        self._store = store
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self._clock = clock

    def _storage_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def is_valid(self, entry: CacheEntry) -> bool:
        """Whether the entry is still inside its TTL window."""
        return self._clock() - entry.stored_at <= self.ttl_seconds

    async def _read_entry(self, storage_key: str) -> CacheEntry | None:
        try:
            raw = await self._store.get(storage_key)
        except Exception as e:
            raise CacheError(f"Storage read failed: {e}") from e
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate_json(raw)
        except PydanticValidationError as e:
            raise CacheError(f"Corrupt cache entry: {e.error_count()} errors") from e

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss, expiry or failure.

        Does not delete expired entries.
        """
        try:
            entry = await self._read_entry(self._storage_key(key))
        except CacheError as e:
            logger.warning("Error getting cached data", key=key, error=str(e))
            return None

        if entry is None:
            logger.debug("Cache miss", key=key)
            return None
        if not self.is_valid(entry):
            logger.debug("Cache entry expired", key=key, stored_at=entry.stored_at)
            return None

        logger.debug("Cache hit", key=key)
        return entry.data

    async def set(self, key: str, value: Any) -> None:
        """Store value under key, stamping the current time. Best effort."""
        try:
            payload = CacheEntry(data=value, stored_at=self._clock()).model_dump_json()
        except Exception as e:
            logger.warning("Error serializing cache data", key=key, error=str(e))
            return

        try:
            ok = await self._store.set(self._storage_key(key), payload)
        except Exception as e:
            logger.warning("Error caching data", key=key, error=str(e))
            return

        if not ok:
            logger.warning("Cache write rejected by storage", key=key)

    async def purge_expired(self) -> int:
        """Delete expired and unreadable entries under this cache's prefix.

        Returns:
            Number of entries removed
        """
        try:
            keys = [k for k in await self._store.keys() if k.startswith(self.prefix)]
        except Exception as e:
            logger.error("Error clearing expired cache", error=str(e))
            return 0

        removed = 0
        for storage_key in keys:
            try:
                entry = await self._read_entry(storage_key)
            except CacheError:
                expired = True
            else:
                expired = entry is not None and not self.is_valid(entry)

            if not expired:
                continue

            try:
                await self._store.delete(storage_key)
                removed += 1
            except Exception as e:
                logger.warning("Error evicting cache entry", key=storage_key, error=str(e))

        logger.info("Expired cache entries purged", scanned=len(keys), removed=removed)
        return removed
