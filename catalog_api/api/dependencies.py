"""Request dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, Request

from catalog_api.catalog.repository import ProductRepository
from catalog_api.catalog.service import CatalogService
from catalog_api.domain.exceptions import CatalogUnavailableError
from catalog_api.infrastructure.config import settings


def get_repository(request: Request) -> ProductRepository:
    """Build a repository over the process-wide Firestore client.

    The client is created once in the application lifespan and stored on
    ``app.state``.
    """
    client = getattr(request.app.state, "firestore", None)
    if client is None:
        raise CatalogUnavailableError("Product store is not initialized")
    return ProductRepository(client, settings.products_collection)


def get_catalog_service(
    request: Request,
    repository: Annotated[ProductRepository, Depends(get_repository)],
) -> CatalogService:
    """Get catalog service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return CatalogService(repository, request_id=request_id)
