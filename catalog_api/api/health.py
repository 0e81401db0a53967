"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from google.api_core.exceptions import GoogleAPIError

from catalog_api.api.dependencies import get_repository
from catalog_api.api.schemas import HealthResponse
from catalog_api.catalog.repository import ProductRepository
from catalog_api.domain.exceptions import CatalogUnavailableError
from catalog_api.infrastructure.config import settings

router = APIRouter()

logger = structlog.get_logger()


def get_optional_repository(request: Request) -> ProductRepository | None:
    """Resolve the repository without failing when the store is missing."""
    try:
        return get_repository(request)
    except CatalogUnavailableError:
        return None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="catalog-api",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check(
    repository: Annotated[ProductRepository | None, Depends(get_optional_repository)],
) -> JSONResponse:
    """Check if the product store is reachable.

    Returns:
        200 when a minimal read succeeds, 503 otherwise.
    """
    if repository is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "reason": "store not initialized"},
        )

    try:
        await repository.ping()
    except GoogleAPIError as e:
        logger.warning("Readiness check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "reason": "store unreachable"},
        )

    return JSONResponse(content={"status": "ready"})
