"""API routes module."""

from catalog_sync.api.routes.catalog import router as catalog_router
from catalog_sync.api.routes.health import router as health_router

__all__ = ["catalog_router", "health_router"]
