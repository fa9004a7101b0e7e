"""Catalog Client - HTTP client for the remote product catalog API.

Wraps the list, category, search, categories and product-detail
endpoints. Every failure surfaces as a typed catalog error:
transport problems, timeouts and non-2xx responses raise NetworkError,
malformed payloads raise ValidationError.
"""

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from catalog_sync.config import settings
from catalog_sync.core.errors import NetworkError, ValidationError
from catalog_sync.infra.logging import get_logger
from catalog_sync.schemas.catalog import Category, Product, ProductPage

logger = get_logger(__name__)

_categories_adapter: TypeAdapter[list[Category | str]] = TypeAdapter(list[Category | str])


class CatalogClient:
    """Async HTTP client for the catalog API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize catalog client.

        Args:
            base_url: Catalog API base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            transport: Optional httpx transport (used to stub the API in tests)
        """
        self.base_url = (base_url or settings.catalog_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.catalog_api_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a path and decode the JSON body.

        Raises:
            NetworkError: On timeout, transport failure or non-2xx status
            ValidationError: If the body is not JSON
        """
        client = await self._get_client()

        try:
            response = await client.get(path, params=params)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error("Catalog request timed out", path=path, timeout=self.timeout)
            raise NetworkError(f"Request timed out after {self.timeout:g}s") from e

        except httpx.HTTPStatusError as e:
            logger.error(
                "Catalog API returned error",
                path=path,
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
            )
            raise NetworkError(
                f"Catalog API returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e

        except httpx.HTTPError as e:
            logger.error("Catalog request failed", path=path, error=str(e))
            raise NetworkError(f"Network request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            logger.error("Catalog API returned invalid JSON", path=path)
            raise ValidationError("Catalog API returned an invalid response") from e

    @staticmethod
    def _parse_products(payload: Any, path: str) -> list[Product]:
        try:
            return ProductPage.model_validate(payload).products
        except PydanticValidationError as e:
            logger.error("Malformed product payload", path=path, errors=e.error_count())
            raise ValidationError("Catalog API returned malformed products") from e

    async def list_products(self, skip: int = 0, limit: int = 10) -> ProductPage:
        """Fetch one page of the full catalog.

        Args:
            skip: Number of products to skip
            limit: Page size

        Returns:
            ProductPage with products, total, skip and limit
        """
        path = "/products"
        payload = await self._get_json(path, params={"limit": limit, "skip": skip})
        try:
            page = ProductPage.model_validate(payload)
        except PydanticValidationError as e:
            logger.error("Malformed product page", path=path, errors=e.error_count())
            raise ValidationError("Catalog API returned malformed products") from e

        logger.debug("Fetched product page", skip=skip, limit=limit, count=len(page.products))
        return page

    async def list_by_category(self, slug: str) -> list[Product]:
        """Fetch every product in a category."""
        path = f"/products/category/{quote(slug, safe='')}"
        products = self._parse_products(await self._get_json(path), path)
        logger.debug("Fetched category products", category=slug, count=len(products))
        return products

    async def search(self, query: str) -> list[Product]:
        """Full-text product search."""
        path = "/products/search"
        products = self._parse_products(await self._get_json(path, params={"q": query}), path)
        logger.debug("Fetched search results", query=query, count=len(products))
        return products

    async def list_categories(self) -> list[Category]:
        """Fetch the category list.

        Accepts both category objects and bare slug strings.
        """
        path = "/products/categories"
        payload = await self._get_json(path)
        try:
            items = _categories_adapter.validate_python(payload)
        except PydanticValidationError as e:
            logger.error("Malformed categories payload", path=path, errors=e.error_count())
            raise ValidationError("Catalog API returned malformed categories") from e

        return [
            item if isinstance(item, Category) else Category(
                name=item,
                slug=item,
                url=f"{self.base_url}/products/category/{item}",
            )
            for item in items
            if item
        ]

    async def get_product(self, product_id: int) -> Product:
        """Fetch a single product by id."""
        path = f"/products/{product_id}"
        payload = await self._get_json(path)
        try:
            return Product.model_validate(payload)
        except PydanticValidationError as e:
            logger.error("Malformed product payload", path=path, errors=e.error_count())
            raise ValidationError(f"Catalog API returned a malformed product {product_id}") from e
