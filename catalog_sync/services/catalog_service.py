"""Catalog Runtime - application root that owns the catalog engine.

Builds and wires the key-value store, TTL cache, catalog client, state,
orchestrator, persistor and controller. Created once at startup and
closed at shutdown; components receive their collaborators explicitly.
"""

from catalog_sync.config import Settings, settings as default_settings
from catalog_sync.core.catalog_controller import CatalogController
from catalog_sync.core.catalog_state import CatalogState
from catalog_sync.core.fetch_orchestrator import FetchOrchestrator
from catalog_sync.core.persistence import StatePersistor
from catalog_sync.core.ttl_cache import TTLCache
from catalog_sync.infra.logging import get_logger
from catalog_sync.infra.storage import KeyValueStore, create_store
from catalog_sync.services.catalog_client import CatalogClient

logger = get_logger(__name__)


class CatalogRuntime:
    """Owns every long-lived catalog component."""

    def __init__(
        self,
        config: Settings | None = None,
        store: KeyValueStore | None = None,
        client: CatalogClient | None = None,
    ) -> None:
        """Initialize runtime.

        Args:
            config: Settings (defaults to the environment settings)
            store: Key-value store (built from settings if not provided)
            client: Catalog API client (built from settings if not provided)
        """
        self.config = config or default_settings
        self.store = store or create_store(
            self.config.storage_backend,
            self.config.storage_path,
        )
        self.client = client or CatalogClient(
            base_url=self.config.catalog_api_url,
            timeout=self.config.catalog_api_timeout,
        )
        self.cache = TTLCache(
            self.store,
            ttl_seconds=self.config.cache_ttl_seconds,
            prefix=self.config.cache_key_prefix,
        )
        self.state = CatalogState()
        self.orchestrator = FetchOrchestrator(
            self.client,
            self.cache,
            self.state,
            page_size=self.config.page_size,
        )
        self.persistor = StatePersistor(
            self.store,
            key=self.config.persist_key,
            version=self.config.persist_version,
        )
        self.controller = CatalogController(
            self.state,
            self.orchestrator,
            persistor=self.persistor,
            debounce_seconds=self.config.search_debounce_seconds,
        )

    async def start(self) -> None:
        """Evict expired cache entries and restore the persisted partition."""
        removed = await self.cache.purge_expired()
        restored = await self.persistor.restore(self.state)
        logger.info(
            "Catalog runtime started",
            cache_entries_removed=removed,
            state_restored=restored,
            api_url=self.client.base_url,
        )

    async def close(self) -> None:
        """Stop pending work, persist state and close the HTTP client."""
        await self.controller.aclose()
        await self.client.close()
        logger.info("Catalog runtime closed")

    async def storage_healthy(self) -> bool:
        """Round-trip a probe key through the key-value store."""
        probe_key = "__health_probe"
        if not await self.store.set(probe_key, "ok"):
            return False
        healthy = await self.store.get(probe_key) == "ok"
        await self.store.delete(probe_key)
        return healthy
