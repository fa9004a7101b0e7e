"""Catalog state container.

The single source of truth for what the UI renders. Holds the All-products
buffer (which also carries search results), per-category buffers, the
category list, the active mode, pagination cursors and transient UI
signals. All mutation goes through the reducer methods below; every
mutation bumps ``revision`` and notifies subscribers.

The container is owned by the catalog runtime and injected where needed.
It is only touched from the event loop, so it carries no locks.
"""

from collections.abc import Callable, Iterable
from typing import Literal

from catalog_sync.core.errors import ErrorKind
from catalog_sync.infra.logging import get_logger
from catalog_sync.schemas.catalog import (
    CatalogMode,
    CatalogSnapshot,
    Category,
    ModeKind,
    Product,
    ProductSection,
)

logger = get_logger(__name__)

StateListener = Callable[["CatalogState"], None]

SEARCH_SECTION_TITLE = "Search Results"


class CatalogState:
    """Mutable catalog aggregate with reducer-style transitions."""

    def __init__(self) -> None:
        self.all_products: list[Product] = []
        self.products_by_category: dict[str, list[Product]] = {}
        self.categories: list[Category] = []
        self.mode: CatalogMode = CatalogMode.all()
        self.current_page: int = 0
        self.has_more: bool = True
        self.refreshing: bool = False
        self.error: str | None = None
        self.error_kind: ErrorKind | None = None
        self.revision: int = 0

        # What the All slot currently holds: catalog pages or search results
        self.all_products_origin: Literal["catalog", "search"] = "catalog"
        # All-mode cursor parked while another mode is in view
        self._all_cursor: tuple[int, bool] | None = None
        self._in_flight = 0
        self._listeners: list[StateListener] = []

    # -------------------------------------------------------------------------
    # Observation
    # -------------------------------------------------------------------------

    @property
    def loading(self) -> bool:
        """True while any fetch is in flight."""
        return self._in_flight > 0

    @property
    def selected_category(self) -> str | None:
        return self.mode.selected_category

    @property
    def search_query(self) -> str:
        return self.mode.search_query

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self.revision += 1
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error("State listener failed", error=str(e), exc_info=True)

    def visible_products(self) -> list[Product]:
        """Products for the active mode."""
        if self.mode.kind is ModeKind.CATEGORY:
            return list(self.products_by_category.get(self.mode.selector or "", []))
        return list(self.all_products)

    def sections(self) -> list[ProductSection]:
        """Visible products grouped for display.

        Search shows a single results section, a category shows its own
        buffer, All groups products by category in first-seen order.
        """
        if self.mode.kind is ModeKind.SEARCH:
            return [ProductSection(title=SEARCH_SECTION_TITLE, products=list(self.all_products))]

        if self.mode.kind is ModeKind.CATEGORY:
            slug = self.mode.selector or ""
            return [ProductSection(title=slug, products=self.visible_products())]

        grouped: dict[str, list[Product]] = {}
        for product in self.all_products:
            grouped.setdefault(product.category, []).append(product)
        return [ProductSection(title=title, products=items) for title, items in grouped.items()]

    def snapshot(self) -> CatalogSnapshot:
        """Immutable copy of the current state for the UI layer."""
        return CatalogSnapshot(
            mode=self.mode.kind,
            selected_category=self.selected_category,
            search_query=self.search_query,
            all_products=list(self.all_products),
            products_by_category={k: list(v) for k, v in self.products_by_category.items()},
            categories=list(self.categories),
            sections=self.sections(),
            current_page=self.current_page,
            has_more=self.has_more,
            loading=self.loading,
            refreshing=self.refreshing,
            error=self.error,
            error_kind=self.error_kind.value if self.error_kind else None,
            revision=self.revision,
        )

    def find_product(self, product_id: int) -> Product | None:
        """Look a product up in any loaded buffer."""
        for product in self.all_products:
            if product.id == product_id:
                return product
        for products in self.products_by_category.values():
            for product in products:
                if product.id == product_id:
                    return product
        return None

    # -------------------------------------------------------------------------
    # Transient signals
    # -------------------------------------------------------------------------

    def begin_fetch(self) -> None:
        self._in_flight += 1
        self._changed()

    def end_fetch(self) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        self._changed()

    def set_refreshing(self, refreshing: bool) -> None:
        self.refreshing = refreshing
        self._changed()

    def set_error(self, message: str, kind: ErrorKind) -> None:
        self.error = message
        self.error_kind = kind
        self._changed()

    def clear_error(self) -> None:
        if self.error is None and self.error_kind is None:
            return
        self.error = None
        self.error_kind = None
        self._changed()

    # -------------------------------------------------------------------------
    # Mode transitions
    # -------------------------------------------------------------------------

    def enter_mode(self, mode: CatalogMode) -> None:
        """Switch mode and reset pagination.

        Leaving All parks the All cursor so the buffer can be shown again
        without refetching.
        """
        if self.mode.kind is ModeKind.ALL and mode.kind is not ModeKind.ALL:
            if self.all_products_origin == "catalog":
                self._all_cursor = (self.current_page, self.has_more)

        self.mode = mode
        self.current_page = 0
        self.has_more = True
        self._changed()

    def restore_all_view(self) -> bool:
        """Return to All using the parked buffer and cursor.

        Returns:
            True if the All buffer was intact and has been restored,
            False if it needs to be fetched again (mode is still switched)
        """
        cursor = self._all_cursor
        self._all_cursor = None
        intact = (
            cursor is not None
            and self.all_products_origin == "catalog"
            and len(self.all_products) > 0
        )

        self.mode = CatalogMode.all()
        if intact and cursor is not None:
            self.current_page, self.has_more = cursor
        else:
            self.current_page = 0
            self.has_more = True
        self._changed()
        return intact

    # -------------------------------------------------------------------------
    # Buffer updates
    # -------------------------------------------------------------------------

    def reset_all_products(self) -> None:
        """Empty the All buffer and its pagination (refresh)."""
        self.all_products = []
        self.all_products_origin = "catalog"
        self._all_cursor = None
        self.current_page = 0
        self.has_more = True
        self._changed()

    def publish_page(self, products: Iterable[Product], base: int) -> None:
        """Place a page into the All buffer starting at ``base``.

        ``base`` 0 replaces the buffer; ``base == len(buffer)`` appends.
        Publishing the same page twice at the same base (provisional then
        authoritative) replaces rather than duplicates.
        """
        self.all_products = self.all_products[:base] + list(products)
        self.all_products_origin = "catalog"
        self._changed()

    def complete_page(self, page: int, result_count: int) -> None:
        """Advance pagination after an authoritative page fetch."""
        self.current_page = page + 1
        self.has_more = result_count > 0
        self._changed()

    def publish_search(self, products: Iterable[Product]) -> None:
        """Show search results in the All slot. Search never paginates."""
        self.all_products = list(products)
        self.all_products_origin = "search"
        self._all_cursor = None
        self.has_more = False
        self._changed()

    def publish_category(self, slug: str, products: Iterable[Product]) -> None:
        """Replace one category's buffer."""
        self.products_by_category[slug] = list(products)
        self._changed()

    def set_categories(self, categories: Iterable[Category]) -> None:
        self.categories = list(categories)
        self._changed()

    def hydrate(
        self,
        *,
        all_products: list[Product],
        products_by_category: dict[str, list[Product]],
        categories: list[Category],
        mode: CatalogMode,
        current_page: int,
        has_more: bool,
        all_products_origin: Literal["catalog", "search"] = "catalog",
    ) -> None:
        """Load the persisted products partition (startup only)."""
        self.all_products = list(all_products)
        self.products_by_category = {k: list(v) for k, v in products_by_category.items()}
        self.categories = list(categories)
        self.mode = mode
        self.current_page = current_page
        self.has_more = has_more
        self.all_products_origin = all_products_origin
        self._changed()
