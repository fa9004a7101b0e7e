"""Health check endpoints.

Provides health status for liveness/readiness probes.
"""

from fastapi import APIRouter

from catalog_sync import __version__
from catalog_sync.api.deps import Runtime
from catalog_sync.config import settings
from catalog_sync.infra.logging import get_logger
from catalog_sync.schemas.common import HealthResponse

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Basic health check.

    Returns 200 if service is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
        checks={},
    )


@router.get("/health/ready", response_model=HealthResponse)
async def health_ready(runtime: Runtime) -> HealthResponse:
    """Readiness check.

    Verifies the key-value store accepts reads and writes.
    """
    checks: dict[str, bool] = {}

    try:
        checks["storage"] = await runtime.storage_healthy()
    except Exception as e:
        logger.warning("Storage health check failed", error=str(e))
        checks["storage"] = False

    all_healthy = all(checks.values()) if checks else True

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        version=__version__,
        environment=settings.environment,
        checks=checks,
    )


@router.get("/health/live", response_model=HealthResponse)
async def health_live() -> HealthResponse:
    """Liveness check."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment,
        checks={"alive": True},
    )
