"""FastAPI dependencies for dependency injection.

The catalog runtime is created in the application lifespan and stored on
``app.state``; routes receive it (or its controller) through these
dependencies instead of a module-level singleton.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from catalog_sync.core.catalog_controller import CatalogController
from catalog_sync.infra.logging import get_logger
from catalog_sync.services.catalog_service import CatalogRuntime

logger = get_logger(__name__)


def get_runtime(request: Request) -> CatalogRuntime:
    """Get the catalog runtime owned by the application.

    Raises:
        HTTPException: 503 if the runtime has not been started
    """
    runtime: CatalogRuntime | None = getattr(request.app.state, "catalog", None)
    if runtime is None:
        logger.warning("Catalog runtime not available", path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Catalog runtime not started",
        )
    return runtime


def get_controller(
    runtime: Annotated[CatalogRuntime, Depends(get_runtime)],
) -> CatalogController:
    """Get the catalog controller."""
    return runtime.controller


# Type aliases for cleaner annotations
Runtime = Annotated[CatalogRuntime, Depends(get_runtime)]
Controller = Annotated[CatalogController, Depends(get_controller)]
