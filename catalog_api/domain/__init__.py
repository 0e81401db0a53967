"""Catalog domain errors."""

from catalog_api.domain.exceptions import (
    CatalogError,
    CatalogUnavailableError,
    InvalidCursorError,
    InvalidQueryError,
    ProductNotFoundError,
)

__all__ = [
    "CatalogError",
    "CatalogUnavailableError",
    "InvalidCursorError",
    "InvalidQueryError",
    "ProductNotFoundError",
]
