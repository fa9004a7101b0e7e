"""Fetch Orchestrator - cache-then-network resolution for each browsing mode.

Every operation follows the same protocol:

1. Build the cache key for the request.
2. Read the TTL cache; a hit is published provisionally so the UI has
   something to show immediately.
3. Always hit the network.
4. On success write the cache, publish the authoritative result, update
   pagination and clear the error.
5. On failure record the error and leave any provisional data visible.
6. ``loading`` is raised on entry and dropped in a ``finally`` block.

Requests are tagged with a per-mode sequence number. A completion whose
number is no longer the latest issued for its mode is discarded, so a slow
earlier response can never clobber a newer one. Switching modes supersedes
in-flight requests of every product mode.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from catalog_sync.core.catalog_state import CatalogState
from catalog_sync.core.errors import CatalogError
from catalog_sync.core.ttl_cache import TTLCache
from catalog_sync.infra.logging import get_logger
from catalog_sync.schemas.catalog import CatalogMode, Category, Product

if TYPE_CHECKING:
    from catalog_sync.services.catalog_client import CatalogClient

logger = get_logger(__name__)

T = TypeVar("T")

MODE_ALL = "all"
MODE_CATEGORY = "category"
MODE_SEARCH = "search"
MODE_CATEGORIES = "categories"
PRODUCT_MODES = (MODE_ALL, MODE_CATEGORY, MODE_SEARCH)

_products_adapter: TypeAdapter[list[Product]] = TypeAdapter(list[Product])
_categories_adapter: TypeAdapter[list[Category]] = TypeAdapter(list[Category])


def products_page_key(page: int) -> str:
    return f"products_page_{page}"


def category_key(slug: str) -> str:
    return f"category_{slug.lower()}"


def search_key(query: str) -> str:
    return f"search_{query.lower()}"


CATEGORIES_KEY = "categories"


def _encode_products(products: list[Product]) -> list[dict[str, Any]]:
    return [p.to_wire() for p in products]


def _encode_categories(categories: list[Category]) -> list[dict[str, Any]]:
    return [c.model_dump(mode="json") for c in categories]


class FetchOrchestrator:
    """Resolves catalog requests through the cache and the network."""

    def __init__(
        self,
        client: CatalogClient,
        cache: TTLCache,
        state: CatalogState,
        page_size: int = 10,
    ) -> None:
        """Initialize orchestrator.

        Args:
            client: Remote catalog API client
            cache: TTL cache for provisional results
            state: Catalog state to publish into
            page_size: Products per page in All mode
        """
        self.client = client
        self.cache = cache
        self.state = state
        self.page_size = page_size
        self._sequence: dict[str, int] = defaultdict(int)

    # -------------------------------------------------------------------------
    # Sequencing
    # -------------------------------------------------------------------------

    def _issue(self, mode: str) -> int:
        self._sequence[mode] += 1
        return self._sequence[mode]

    def is_current(self, mode: str, sequence: int) -> bool:
        """Whether ``sequence`` is the latest request issued for ``mode``."""
        return self._sequence[mode] == sequence

    def supersede(self, *modes: str) -> None:
        """Invalidate every in-flight request of the given modes."""
        for mode in modes:
            self._sequence[mode] += 1

    def switch_mode(self, mode: CatalogMode) -> None:
        """Enter a mode, superseding in-flight product requests.

        Re-entering the exact active mode keeps in-flight requests alive.
        """
        if mode != self.state.mode:
            self.supersede(*PRODUCT_MODES)
        self.state.enter_mode(mode)

    def return_to_all(self) -> bool:
        """Show the All buffer again without refetching when possible.

        Returns:
            True if the parked All buffer was restored, False if it must be
            fetched again
        """
        if self.state.mode != CatalogMode.all():
            self.supersede(*PRODUCT_MODES)
        return self.state.restore_all_view()

    # -------------------------------------------------------------------------
    # Protocol
    # -------------------------------------------------------------------------

    async def _read_cached(self, key: str, adapter: TypeAdapter[T]) -> T | None:
        cached = await self.cache.get(key)
        if cached is None:
            return None
        try:
            return adapter.validate_python(cached)
        except PydanticValidationError as e:
            logger.warning("Discarding unreadable cached value", key=key, errors=e.error_count())
            return None

    async def _resolve(
        self,
        mode: str,
        cache_key: str,
        adapter: TypeAdapter[T],
        fetch: Callable[[], Awaitable[T]],
        encode: Callable[[T], Any],
        publish: Callable[[T], None],
        preview: Callable[[T], None] | None = None,
        on_failure: Callable[[T | None], None] | None = None,
    ) -> bool:
        """Run the cache-then-network protocol for one request.

        Args:
            mode: Sequencing key
            cache_key: TTL cache key
            adapter: Decodes cached JSON back into the result type
            fetch: Network call
            encode: Converts a result into JSON-safe cache data
            publish: Writes the authoritative result into state
            preview: Writes a cached result into state (defaults to publish)
            on_failure: Called with the provisional value after a network
                failure, if the request is still current

        Returns:
            True if the authoritative result was published
        """
        preview = preview or publish
        sequence = self._issue(mode)
        self.state.begin_fetch()
        try:
            provisional = await self._read_cached(cache_key, adapter)
            if provisional is not None and self.is_current(mode, sequence):
                preview(provisional)
                logger.debug("Published cached value", mode=mode, key=cache_key)

            try:
                result = await fetch()
            except CatalogError as e:
                if not self.is_current(mode, sequence):
                    logger.info(
                        "Ignoring failure of superseded request",
                        mode=mode,
                        key=cache_key,
                        error=str(e),
                    )
                    return False
                logger.warning(
                    "Catalog fetch failed",
                    mode=mode,
                    key=cache_key,
                    error=str(e),
                    error_kind=e.kind.value,
                    stale_data=provisional is not None,
                )
                if on_failure is not None:
                    on_failure(provisional)
                self.state.set_error(e.message, e.kind)
                return False

            await self.cache.set(cache_key, encode(result))

            if not self.is_current(mode, sequence):
                logger.info(
                    "Discarding superseded response",
                    mode=mode,
                    key=cache_key,
                    sequence=sequence,
                    latest=self._sequence[mode],
                )
                return False

            publish(result)
            self.state.clear_error()
            return True
        finally:
            self.state.end_fetch()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def fetch_products(self, page: int = 0, refresh: bool = False) -> bool:
        """Fetch one page of the full catalog into the All buffer.

        Page 0 replaces the buffer (cleared first on refresh); later pages
        append. ``has_more`` becomes ``len(page) > 0``.

        Args:
            page: Zero-based page index
            refresh: Clear the buffer before publishing page 0

        Returns:
            True if the network result was published
        """
        if page < 0:
            raise ValueError("page must be non-negative")

        if refresh and page == 0:
            self.state.reset_all_products()

        base = 0 if page == 0 else len(self.state.all_products)
        logger.info("Fetching products", page=page, refresh=refresh, base=base)

        def publish(products: list[Product]) -> None:
            self.state.publish_page(products, base)

        def complete(products: list[Product]) -> None:
            publish(products)
            self.state.complete_page(page, len(products))

        def keep_provisional(products: list[Product] | None) -> None:
            # Cached page stays on screen; keep the cursor in step with it
            if products is not None:
                self.state.complete_page(page, len(products))

        async def fetch() -> list[Product]:
            result = await self.client.list_products(
                skip=page * self.page_size,
                limit=self.page_size,
            )
            return result.products

        return await self._resolve(
            MODE_ALL,
            products_page_key(page),
            _products_adapter,
            fetch,
            _encode_products,
            complete,
            preview=publish,
            on_failure=keep_provisional,
        )

    async def fetch_category(self, slug: str) -> bool:
        """Fetch a category as one complete snapshot, replacing its buffer."""
        if not slug:
            raise ValueError("slug is required")

        self.switch_mode(CatalogMode.category(slug))
        logger.info("Fetching category products", category=slug)

        def publish(products: list[Product]) -> None:
            self.state.publish_category(slug, products)

        return await self._resolve(
            MODE_CATEGORY,
            category_key(slug),
            _products_adapter,
            lambda: self.client.list_by_category(slug),
            _encode_products,
            publish,
        )

    async def search(self, query: str) -> bool:
        """Search the catalog; results replace the All view.

        Blank queries clear the search and reload All page 0.
        """
        if not query.strip():
            logger.info("Search cleared, reloading all products")
            self.switch_mode(CatalogMode.all())
            return await self.fetch_products(0, refresh=True)

        self.switch_mode(CatalogMode.search(query))
        logger.info("Searching products", query=query)

        return await self._resolve(
            MODE_SEARCH,
            search_key(query),
            _products_adapter,
            lambda: self.client.search(query),
            _encode_products,
            self.state.publish_search,
        )

    async def fetch_categories(self) -> bool:
        """Fetch the category list."""
        return await self._resolve(
            MODE_CATEGORIES,
            CATEGORIES_KEY,
            _categories_adapter,
            self.client.list_categories,
            _encode_categories,
            self.state.set_categories,
        )
