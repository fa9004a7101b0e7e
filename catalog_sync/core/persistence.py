"""Durable products partition with versioned migrations.

Only the products partition of the catalog state survives restarts:
buffers, categories, mode and pagination. Loading/refreshing/error
signals are never written.

The stored document is ``{"version": N, "products": {...}}``. When ``N``
is older than the current schema version, every registered migration
with ``N < target <= current`` runs in ascending order before the
partition is validated.
"""

import json
from collections.abc import Callable
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from catalog_sync.core.catalog_state import CatalogState
from catalog_sync.infra.logging import get_logger
from catalog_sync.infra.storage import KeyValueStore
from catalog_sync.schemas.catalog import CatalogMode, Category, Product

logger = get_logger(__name__)

Migration = Callable[[dict[str, Any]], dict[str, Any]]

DEFAULT_PERSIST_KEY = "persist:root"
CURRENT_VERSION = 1


class PersistedProducts(BaseModel):
    """Schema of the persisted products partition."""

    all_products: list[Product] = Field(default_factory=list)
    products_by_category: dict[str, list[Product]] = Field(default_factory=dict)
    categories: list[Category] = Field(default_factory=list)
    mode: CatalogMode = Field(default_factory=CatalogMode.all)
    current_page: int = Field(default=0, ge=0)
    has_more: bool = True
    all_products_origin: Literal["catalog", "search"] = "catalog"


class StatePersistor:
    """Saves and restores the products partition through a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_PERSIST_KEY,
        version: int = CURRENT_VERSION,
        migrations: dict[int, Migration] | None = None,
    ) -> None:
        """Initialize persistor.

        Args:
            store: Backing key-value store
            key: Storage key for the document
            version: Current schema version
            migrations: Target version -> function upgrading the partition
                dict from the previous version
        """
        self._store = store
        self.key = key
        self.version = version
        self._migrations = dict(migrations or {})

    def register_migration(self, target_version: int, migration: Migration) -> None:
        self._migrations[target_version] = migration

    def _migrate(self, products: dict[str, Any], stored_version: int) -> dict[str, Any]:
        for target in sorted(v for v in self._migrations if stored_version < v <= self.version):
            logger.info("Running state migration", from_version=stored_version, to_version=target)
            products = self._migrations[target](products)
        return products

    async def save(self, state: CatalogState) -> bool:
        """Write the products partition. Returns False on failure."""
        partition = PersistedProducts(
            all_products=state.all_products,
            products_by_category=state.products_by_category,
            categories=state.categories,
            mode=state.mode,
            current_page=state.current_page,
            has_more=state.has_more,
            all_products_origin=state.all_products_origin,
        )
        document = {
            "version": self.version,
            "products": partition.model_dump(mode="json", by_alias=True),
        }
        ok = await self._store.set(self.key, json.dumps(document))
        if not ok:
            logger.warning("Failed to persist catalog state", key=self.key)
        return ok

    async def restore(self, state: CatalogState) -> bool:
        """Load the persisted partition into ``state``.

        Returns:
            True if a stored partition was applied
        """
        raw = await self._store.get(self.key)
        if raw is None:
            logger.info("No persisted catalog state", key=self.key)
            return False

        try:
            document = json.loads(raw)
            stored_version = int(document.get("version", 0))
            products = document.get("products") or {}
            if not isinstance(products, dict):
                raise TypeError("products partition is not an object")
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring undecodable persisted state", key=self.key, error=str(e))
            return False

        if stored_version < self.version:
            try:
                products = self._migrate(products, stored_version)
            except Exception as e:
                logger.error(
                    "State migration failed, starting empty",
                    stored_version=stored_version,
                    error=str(e),
                    exc_info=True,
                )
                return False
        elif stored_version > self.version:
            logger.warning(
                "Persisted state is newer than this build, restoring as-is",
                stored_version=stored_version,
                current_version=self.version,
            )

        try:
            partition = PersistedProducts.model_validate(products)
        except PydanticValidationError as e:
            logger.warning(
                "Ignoring invalid persisted state",
                key=self.key,
                errors=e.error_count(),
            )
            return False

        state.hydrate(
            all_products=partition.all_products,
            products_by_category=partition.products_by_category,
            categories=partition.categories,
            mode=partition.mode,
            current_page=partition.current_page,
            has_more=partition.has_more,
            all_products_origin=partition.all_products_origin,
        )
        logger.info(
            "Restored persisted catalog state",
            version=stored_version,
            products=len(partition.all_products),
            categories=len(partition.categories),
        )
        return True
