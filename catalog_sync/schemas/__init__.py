"""Pydantic schemas for catalog values and API requests/responses."""

from catalog_sync.schemas.catalog import (
    CatalogMode,
    CatalogSnapshot,
    Category,
    ModeKind,
    Product,
    ProductPage,
    ProductSection,
)
from catalog_sync.schemas.common import (
    ErrorResponse,
    HealthResponse,
    SearchTextRequest,
    SelectCategoryRequest,
)

__all__ = [
    "CatalogMode",
    "CatalogSnapshot",
    "Category",
    "ModeKind",
    "Product",
    "ProductPage",
    "ProductSection",
    "ErrorResponse",
    "HealthResponse",
    "SearchTextRequest",
    "SelectCategoryRequest",
]
