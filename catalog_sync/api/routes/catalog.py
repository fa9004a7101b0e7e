"""Catalog endpoints.

Exposes the read-only state snapshot and the UI intents. Intent endpoints
return the snapshot after the intent has been applied; a typed search only
arms the debounce timer, so its snapshot shows the switched mode before
results arrive.
"""

from fastapi import APIRouter, HTTPException, status

from catalog_sync.api.deps import Controller
from catalog_sync.core.errors import CatalogError, NetworkError
from catalog_sync.infra.logging import get_logger
from catalog_sync.schemas.catalog import CatalogSnapshot, Product
from catalog_sync.schemas.common import SearchTextRequest, SelectCategoryRequest

router = APIRouter()
logger = get_logger(__name__)


@router.get("/state", response_model=CatalogSnapshot)
async def get_state(controller: Controller) -> CatalogSnapshot:
    """Current catalog snapshot."""
    return controller.snapshot()


@router.post("/load", response_model=CatalogSnapshot)
async def load_initial(controller: Controller) -> CatalogSnapshot:
    """Load categories and the active mode's products."""
    await controller.load_initial()
    return controller.snapshot()


@router.post("/refresh", response_model=CatalogSnapshot)
async def refresh(controller: Controller) -> CatalogSnapshot:
    """Reload the active mode and the category list."""
    await controller.refresh()
    return controller.snapshot()


@router.post("/next-page", response_model=CatalogSnapshot)
async def load_next_page(controller: Controller) -> CatalogSnapshot:
    """Append the next All page when one may exist."""
    issued = await controller.load_next_page()
    logger.debug("Next page intent handled", issued=issued)
    return controller.snapshot()


@router.put("/category", response_model=CatalogSnapshot)
async def select_category(
    request: SelectCategoryRequest,
    controller: Controller,
) -> CatalogSnapshot:
    """Select a category, or return to All with a null slug."""
    await controller.select_category(request.slug)
    return controller.snapshot()


@router.put("/search", response_model=CatalogSnapshot)
async def set_search_text(
    request: SearchTextRequest,
    controller: Controller,
) -> CatalogSnapshot:
    """Update the search text (debounced)."""
    await controller.set_search_text(request.text)
    return controller.snapshot()


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: int, controller: Controller) -> Product:
    """Product detail from the loaded buffers or the catalog API."""
    try:
        return await controller.get_product(product_id)
    except NetworkError as e:
        if e.status_code == status.HTTP_404_NOT_FOUND:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product {product_id} not found",
            ) from e
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e
    except CatalogError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e
