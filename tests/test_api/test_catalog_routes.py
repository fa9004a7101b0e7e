"""Tests for catalog endpoints."""

import asyncio

import pytest
from httpx import AsyncClient

from catalog_sync.core.errors import NetworkError

from conftest import FakeCatalogClient, build_product


class TestCatalogState:
    @pytest.mark.asyncio
    async def test_initial_snapshot(self, client: AsyncClient):
        response = await client.get("/catalog/state")

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "all"
        assert data["all_products"] == []
        assert data["has_more"] is True
        assert data["loading"] is False

    @pytest.mark.asyncio
    async def test_load_then_next_page(self, client: AsyncClient):
        response = await client.post("/catalog/load")

        assert response.status_code == 200
        data = response.json()
        assert [p["id"] for p in data["all_products"]] == [1, 2]
        assert [c["slug"] for c in data["categories"]] == ["smartphones", "laptops"]
        assert data["all_products"][0]["discountPercentage"] == 5.0

        response = await client.post("/catalog/next-page")

        data = response.json()
        assert [p["id"] for p in data["all_products"]] == [1, 2, 3, 4]
        assert data["current_page"] == 2

    @pytest.mark.asyncio
    async def test_refresh(self, client: AsyncClient):
        await client.post("/catalog/load")
        await client.post("/catalog/next-page")

        response = await client.post("/catalog/refresh")

        data = response.json()
        assert [p["id"] for p in data["all_products"]] == [1, 2]
        assert data["refreshing"] is False

    @pytest.mark.asyncio
    async def test_network_error_in_snapshot(
        self, client: AsyncClient, fake_client: FakeCatalogClient
    ):
        fake_client.errors[("list_products", None)] = NetworkError("Request timed out after 10s")
        fake_client.errors[("list_categories", None)] = NetworkError("Request timed out after 10s")

        response = await client.post("/catalog/load")

        assert response.status_code == 200
        data = response.json()
        assert data["error"] == "Request timed out after 10s"
        assert data["error_kind"] == "network"


class TestModeIntents:
    @pytest.mark.asyncio
    async def test_select_category_and_back(self, client: AsyncClient):
        await client.post("/catalog/load")

        response = await client.put("/catalog/category", json={"slug": "laptops"})

        data = response.json()
        assert data["mode"] == "category"
        assert data["selected_category"] == "laptops"
        assert [s["title"] for s in data["sections"]] == ["laptops"]
        assert [p["id"] for p in data["products_by_category"]["laptops"]] == [2, 4]

        response = await client.put("/catalog/category", json={"slug": None})

        data = response.json()
        assert data["mode"] == "all"
        assert data["selected_category"] is None

    @pytest.mark.asyncio
    async def test_search_is_debounced(self, client: AsyncClient, fake_client: FakeCatalogClient):
        response = await client.put("/catalog/search", json={"text": "laptop"})

        data = response.json()
        assert data["mode"] == "search"
        assert data["search_query"] == "laptop"
        assert fake_client.calls_for("search") == []

        await asyncio.sleep(0.2)
        data = (await client.get("/catalog/state")).json()

        assert [p["id"] for p in data["all_products"]] == [4]
        assert data["sections"][0]["title"] == "Search Results"
        assert data["has_more"] is False

    @pytest.mark.asyncio
    async def test_clearing_search_returns_to_all(self, client: AsyncClient):
        await client.put("/catalog/search", json={"text": "laptop"})

        response = await client.put("/catalog/search", json={"text": ""})

        data = response.json()
        assert data["mode"] == "all"
        assert [p["id"] for p in data["all_products"]] == [1, 2]

    @pytest.mark.asyncio
    async def test_search_text_too_long(self, client: AsyncClient):
        response = await client.put("/catalog/search", json={"text": "x" * 500})

        assert response.status_code == 422


class TestProductDetail:
    @pytest.mark.asyncio
    async def test_product_from_api(self, client: AsyncClient, fake_client: FakeCatalogClient):
        fake_client.products[42] = build_product(42)

        response = await client.get("/catalog/products/42")

        assert response.status_code == 200
        assert response.json()["id"] == 42

    @pytest.mark.asyncio
    async def test_product_not_found(self, client: AsyncClient):
        response = await client.get("/catalog/products/999")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_upstream_failure(self, client: AsyncClient, fake_client: FakeCatalogClient):
        fake_client.errors[("get_product", None)] = NetworkError(
            "Catalog API returned 500", status_code=500
        )

        response = await client.get("/catalog/products/7")

        assert response.status_code == 502
        assert response.json()["detail"] == "Catalog API returned 500"
