"""Services - catalog API client and runtime wiring."""

from catalog_sync.services.catalog_client import CatalogClient
from catalog_sync.services.catalog_service import CatalogRuntime

__all__ = [
    "CatalogClient",
    "CatalogRuntime",
]
