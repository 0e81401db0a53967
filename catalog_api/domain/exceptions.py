"""Catalog exceptions.

Errors raised by the catalog service. The HTTP layer maps each class to a
status code: client errors to 400, missing products to 404 and store
faults to 500.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions."""

    error_code = "CATALOG_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Client Errors
# ============================================================================


class InvalidQueryError(CatalogError):
    """Raised when request parameters are missing or malformed."""

    error_code = "INVALID_QUERY"


class InvalidCursorError(InvalidQueryError):
    """Raised when a pagination cursor cannot be used."""

    error_code = "INVALID_CURSOR"

    def __init__(self, reason: str) -> None:
        super().__init__("Invalid cursor", details={"reason": reason})


# ============================================================================
# Lookup Errors
# ============================================================================


class ProductNotFoundError(CatalogError):
    """Raised when a product ID does not exist in the store."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        super().__init__("Product not found", details={"product_id": product_id})


# ============================================================================
# Store Faults
# ============================================================================


class CatalogUnavailableError(CatalogError):
    """Raised when the document store fails to execute a query.

    The message is the client-facing summary for the failed operation;
    the underlying store exception is chained as ``__cause__``.
    """

    error_code = "STORE_ERROR"
