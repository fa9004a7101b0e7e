"""Catalog controller - UI intents and mode selection.

Translates UI intents (load, refresh, load more, select category, type
search text) into state transitions and orchestrator calls. Category and
search selection are mutually exclusive: setting one always clears the
other because both live in the single ``CatalogMode`` value.
"""

import asyncio

from catalog_sync.core.catalog_state import CatalogState
from catalog_sync.core.fetch_orchestrator import FetchOrchestrator
from catalog_sync.core.persistence import StatePersistor
from catalog_sync.core.search_debouncer import DEFAULT_DEBOUNCE_SECONDS, SearchDebouncer
from catalog_sync.infra.logging import get_logger
from catalog_sync.schemas.catalog import CatalogMode, CatalogSnapshot, ModeKind, Product

logger = get_logger(__name__)


class CatalogController:
    """Entry point for UI intents against the catalog engine."""

    def __init__(
        self,
        state: CatalogState,
        orchestrator: FetchOrchestrator,
        persistor: StatePersistor | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        """Initialize controller.

        Args:
            state: Catalog state container
            orchestrator: Fetch orchestrator bound to the same state
            persistor: Saves the products partition after each intent
            debounce_seconds: Quiet window for typed search text
        """
        self.state = state
        self.orchestrator = orchestrator
        self.persistor = persistor
        self.debouncer = SearchDebouncer(self._run_search, delay_seconds=debounce_seconds)

    def snapshot(self) -> CatalogSnapshot:
        return self.state.snapshot()

    async def _persist(self) -> None:
        if self.persistor is not None:
            await self.persistor.save(self.state)

    async def _reload_active_mode(self) -> None:
        mode = self.state.mode
        if mode.kind is ModeKind.SEARCH:
            await self.orchestrator.search(mode.search_query)
        elif mode.kind is ModeKind.CATEGORY and mode.selected_category:
            await self.orchestrator.fetch_category(mode.selected_category)
        else:
            await self.orchestrator.fetch_products(0, refresh=True)

    async def _run_search(self, query: str) -> None:
        await self.orchestrator.search(query)
        await self._persist()

    # -------------------------------------------------------------------------
    # Intents
    # -------------------------------------------------------------------------

    async def load_initial(self) -> None:
        """Load categories and the active mode's products concurrently."""
        logger.info("Loading initial catalog", mode=self.state.mode.kind.value)
        await asyncio.gather(
            self.orchestrator.fetch_categories(),
            self._reload_active_mode(),
        )
        await self._persist()

    async def refresh(self) -> None:
        """Pull-to-refresh: reload the active mode, then categories.

        Drops a pending debounced search; the reload already covers it.
        """
        self.debouncer.cancel()
        logger.info("Refreshing catalog", mode=self.state.mode.kind.value)
        self.state.set_refreshing(True)
        try:
            await self._reload_active_mode()
            await self.orchestrator.fetch_categories()
        finally:
            self.state.set_refreshing(False)
        await self._persist()

    async def load_next_page(self) -> bool:
        """Fetch the next All page if one may exist.

        Returns:
            True if a fetch was issued
        """
        state = self.state
        if state.loading or not state.has_more or state.mode.kind is not ModeKind.ALL:
            logger.debug(
                "Next page not requested",
                loading=state.loading,
                has_more=state.has_more,
                mode=state.mode.kind.value,
            )
            return False

        await self.orchestrator.fetch_products(state.current_page, refresh=False)
        await self._persist()
        return True

    async def select_category(self, slug: str | None) -> None:
        """Select a category, or return to All with ``None``.

        Clears any search text and drops a pending debounced search.
        """
        self.debouncer.cancel()

        if slug:
            await self.orchestrator.fetch_category(slug)
        elif not self.orchestrator.return_to_all():
            await self.orchestrator.fetch_products(0, refresh=True)
        else:
            logger.info("Restored all products view", products=len(self.state.all_products))

        await self._persist()

    async def set_search_text(self, text: str) -> None:
        """Handle a change of the search field.

        Non-empty text switches to Search mode right away and debounces the
        request. Clearing the field skips the debounce and reloads All.
        """
        if text.strip():
            self.orchestrator.switch_mode(CatalogMode.search(text))
            self.debouncer.schedule(text)
            return

        self.debouncer.cancel()
        await self.orchestrator.search("")
        await self._persist()

    async def get_product(self, product_id: int) -> Product:
        """Return a product from the loaded buffers, else from the API.

        Raises:
            NetworkError: If the product has to be fetched and the request fails
        """
        product = self.state.find_product(product_id)
        if product is not None:
            return product
        return await self.orchestrator.client.get_product(product_id)

    async def aclose(self) -> None:
        """Stop the debouncer and write the final state."""
        await self.debouncer.aclose()
        await self._persist()
