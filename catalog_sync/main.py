"""FastAPI application entry point.

Hosts the catalog synchronization engine and exposes its snapshot and
UI intents over HTTP.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_sync import __version__
from catalog_sync.config import settings
from catalog_sync.infra.logging import get_logger, intent_context, setup_logging
from catalog_sync.schemas.common import ErrorResponse
from catalog_sync.services.catalog_service import CatalogRuntime

# Import routers
from catalog_sync.api.routes.catalog import router as catalog_router
from catalog_sync.api.routes.health import router as health_router

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Build the catalog runtime
    - Purge expired cache entries
    - Restore the persisted products partition

    Shutdown:
    - Cancel pending debounced searches
    - Persist state and close the HTTP client
    """
    logger.info(
        "Catalog Sync starting",
        environment=settings.environment,
        api_url=settings.catalog_api_url,
        storage_backend=settings.storage_backend,
    )

    runtime = CatalogRuntime(settings)
    await runtime.start()
    app.state.catalog = runtime

    yield

    logger.info("Catalog Sync shutting down")
    await runtime.close()
    app.state.catalog = None
    logger.info("Cleanup complete")


app = FastAPI(
    title="Catalog Sync",
    description="Client-side product catalog synchronization engine",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "dev" else None,
    redoc_url=None,
)

# CORS middleware (mainly for local development)
if settings.environment == "dev":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag catalog intent logs with the intent name and log the outcome."""
    path = request.url.path
    if not path.startswith("/catalog") or request.method == "GET":
        return await call_next(request)

    intent = path.removeprefix("/catalog/").replace("/", "_") or "catalog"
    with intent_context(intent, method=request.method):
        response = await call_next(request)
        logger.info(
            "Catalog intent handled",
            path=path,
            status_code=response.status_code,
        )

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with a structured error response."""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            error_type=type(exc).__name__,
        ).model_dump(),
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router, tags=["Health"])
app.include_router(catalog_router, prefix="/catalog", tags=["Catalog"])
