"""Shared fixtures for catalog engine tests."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from catalog_sync.config import Settings
from catalog_sync.core.catalog_state import CatalogState
from catalog_sync.core.errors import NetworkError
from catalog_sync.core.fetch_orchestrator import FetchOrchestrator
from catalog_sync.core.ttl_cache import TTLCache
from catalog_sync.infra.storage import MemoryKeyValueStore
from catalog_sync.schemas.catalog import Category, Product, ProductPage


def build_product(product_id: int, category: str = "smartphones", **overrides: Any) -> Product:
    data: dict[str, Any] = {
        "id": product_id,
        "title": f"Product {product_id}",
        "description": f"Description {product_id}",
        "price": 10.0 + product_id,
        "discountPercentage": 5.0,
        "rating": 4.5,
        "stock": 20,
        "brand": "Acme",
        "category": category,
        "thumbnail": f"https://cdn.test/{product_id}/thumb.png",
        "images": [f"https://cdn.test/{product_id}/1.png"],
    }
    data.update(overrides)
    return Product.model_validate(data)


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCatalogClient:
    """In-process stand-in for CatalogClient with scriptable latency and failures.

    Delays and errors are keyed by ``(operation, argument)``; a key of
    ``(operation, None)`` applies to every call of that operation.
    """

    base_url = "http://catalog.test"

    def __init__(self) -> None:
        self.pages: dict[int, list[Product]] = {}
        self.by_category: dict[str, list[Product]] = {}
        self.search_results: dict[str, list[Product]] = {}
        self.categories: list[Category] = []
        self.products: dict[int, Product] = {}
        self.delays: dict[tuple[str, Any], float] = {}
        self.errors: dict[tuple[str, Any], Exception] = {}
        self.calls: list[tuple[str, Any, float]] = []

    def _lookup(self, table: dict[tuple[str, Any], Any], name: str, arg: Any) -> Any:
        if (name, arg) in table:
            return table[(name, arg)]
        return table.get((name, None))

    async def _call(self, name: str, arg: Any, produce: Callable[[], Any]) -> Any:
        self.calls.append((name, arg, asyncio.get_running_loop().time()))
        delay = self._lookup(self.delays, name, arg)
        if delay:
            await asyncio.sleep(delay)
        error = self._lookup(self.errors, name, arg)
        if error is not None:
            raise error
        return produce()

    def calls_for(self, name: str) -> list[Any]:
        return [arg for call_name, arg, _ in self.calls if call_name == name]

    async def list_products(self, skip: int = 0, limit: int = 10) -> ProductPage:
        page = skip // limit
        return await self._call(
            "list_products",
            page,
            lambda: ProductPage(
                products=self.pages.get(page, []),
                total=sum(len(p) for p in self.pages.values()),
                skip=skip,
                limit=limit,
            ),
        )

    async def list_by_category(self, slug: str) -> list[Product]:
        return await self._call("list_by_category", slug, lambda: self.by_category.get(slug, []))

    async def search(self, query: str) -> list[Product]:
        return await self._call("search", query, lambda: self.search_results.get(query, []))

    async def list_categories(self) -> list[Category]:
        return await self._call("list_categories", None, lambda: list(self.categories))

    async def get_product(self, product_id: int) -> Product:
        def produce() -> Product:
            if product_id not in self.products:
                raise NetworkError("Catalog API returned 404", status_code=404)
            return self.products[product_id]

        return await self._call("get_product", product_id, produce)

    async def close(self) -> None:
        return None


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def cache(store: MemoryKeyValueStore, clock: FakeClock) -> TTLCache:
    return TTLCache(store, ttl_seconds=24 * 60 * 60, clock=clock)


@pytest.fixture
def state() -> CatalogState:
    return CatalogState()


@pytest.fixture
def fake_client() -> FakeCatalogClient:
    client = FakeCatalogClient()
    client.pages = {
        0: [build_product(1), build_product(2, "laptops")],
        1: [build_product(3), build_product(4, "laptops")],
    }
    client.by_category = {
        "laptops": [build_product(2, "laptops"), build_product(4, "laptops")],
    }
    client.search_results = {
        "laptop": [build_product(4, "laptops")],
    }
    client.categories = [
        Category(name="Smartphones", slug="smartphones", url="http://catalog.test/products/category/smartphones"),
        Category(name="Laptops", slug="laptops", url="http://catalog.test/products/category/laptops"),
    ]
    return client


@pytest.fixture
def orchestrator(
    fake_client: FakeCatalogClient,
    cache: TTLCache,
    state: CatalogState,
) -> FetchOrchestrator:
    return FetchOrchestrator(fake_client, cache, state, page_size=2)  # type: ignore[arg-type]


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        environment="dev",
        catalog_api_url="http://catalog.test",
        storage_backend="memory",
        local_storage_root=str(tmp_path),
        page_size=2,
        search_debounce_seconds=0.05,
    )


@pytest.fixture
async def client(test_settings: Settings, fake_client: FakeCatalogClient, store: MemoryKeyValueStore):
    """HTTP client bound to the FastAPI app with a started runtime."""
    from catalog_sync.main import app
    from catalog_sync.services.catalog_service import CatalogRuntime

    runtime = CatalogRuntime(test_settings, store=store, client=fake_client)  # type: ignore[arg-type]
    await runtime.start()
    app.state.catalog = runtime

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

    await runtime.close()
    app.state.catalog = None
