"""Catalog service for product queries.

High-level service that turns request parameters into repository calls,
implements page-number and cursor pagination, and maps store faults to
catalog errors.
"""

import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import structlog
from google.api_core.exceptions import GoogleAPIError

from catalog_api.catalog.cursor import PageCursor, decode_cursor, encode_cursor
from catalog_api.catalog.models import DEFAULT_SORT_FIELD, SortOrder, product_from_snapshot
from catalog_api.catalog.repository import ProductRepository
from catalog_api.domain.exceptions import (
    CatalogUnavailableError,
    InvalidCursorError,
    InvalidQueryError,
    ProductNotFoundError,
)

logger = structlog.get_logger()

# Firestore encodes query limits as int32.
MAX_QUERY_LIMIT = 2**31 - 1


@dataclass
class ListParams:
    """Parameters for the product list.

    Attributes:
        category: Optional category filter.
        sort_by: Sort field.
        order: Sort direction.
        limit: Page size.
        page: Page number (1-indexed), ignored when ``cursor`` is set.
        cursor: Opaque token from a previous page.
    """

    category: str | None = None
    sort_by: str = DEFAULT_SORT_FIELD
    order: SortOrder = SortOrder.ASC
    limit: int = 10
    page: int = 1
    cursor: str | None = None

    @property
    def prefix_size(self) -> int:
        """Number of products on all pages before ``page``."""
        return (self.page - 1) * self.limit


@dataclass
class PriceFilter:
    """Parameters for the price/brand filter.

    Attributes:
        min_price: Lower bound, inclusive.
        max_price: Upper bound, inclusive.
        brand: Optional brand, compared lowercase.
        sort_by: Sort field, always ascending.
    """

    min_price: float = 0.0
    max_price: float = math.inf
    brand: str | None = None
    sort_by: str = DEFAULT_SORT_FIELD


@dataclass
class ProductPage:
    """One page of products.

    Attributes:
        items: Products on this page.
        next_cursor: Token for the following page, None when the page
            was not full.
    """

    items: list[dict[str, Any]]
    next_cursor: str | None = None


class CatalogService:
    """Service for catalog read operations.

    Example usage:
        service = CatalogService(ProductRepository(client))
        page = await service.list_products(ListParams(category="shoes", page=2))
        results = await service.search_products("Red")
    """

    def __init__(
        self,
        repository: ProductRepository,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            repository: Product repository.
            request_id: Request ID for log correlation.
        """
        self.repository = repository
        self.request_id = request_id

    @contextmanager
    def _store_call(self, operation: str, message: str) -> Iterator[None]:
        """Translate store failures into CatalogUnavailableError."""
        try:
            yield
        except GoogleAPIError as e:
            logger.exception(
                "Store query failed",
                operation=operation,
                error=str(e),
                request_id=self.request_id,
            )
            raise CatalogUnavailableError(message) from e

    async def list_products(self, params: ListParams) -> ProductPage:
        """List products with ordering and pagination.

        Page N > 1 is located by querying the first (N-1) * limit products
        under the same filter and ordering and resuming after the last of
        them. If that prefix query is empty no cursor is applied. A page past
        the end of the data is empty.

        Args:
            params: List parameters.

        Returns:
            The requested page.

        Raises:
            InvalidQueryError: On non-positive limit or page.
            InvalidCursorError: If the cursor cannot be used.
            CatalogUnavailableError: On store failure.
        """
        if params.limit < 1:
            raise InvalidQueryError("limit must be a positive integer")
        if params.page < 1:
            raise InvalidQueryError("page must be a positive integer")
        if not params.sort_by:
            raise InvalidQueryError("sortBy must not be empty")
        if not params.cursor and params.prefix_size > MAX_QUERY_LIMIT:
            raise InvalidQueryError("page is too large for this limit")

        with self._store_call("list_products", "Failed to fetch products"):
            if params.cursor:
                start_after = await self._resolve_cursor(params)
            elif params.page > 1:
                prefix = await self.repository.find_page(
                    category=params.category,
                    sort_by=params.sort_by,
                    order=params.order,
                    limit=params.prefix_size,
                )
                start_after = prefix[-1] if prefix else None
            else:
                start_after = None

            snapshots = await self.repository.find_page(
                category=params.category,
                sort_by=params.sort_by,
                order=params.order,
                limit=params.limit,
                start_after=start_after,
            )

        next_cursor = None
        if len(snapshots) == params.limit:
            next_cursor = encode_cursor(
                PageCursor(
                    product_id=snapshots[-1].id,
                    sort_by=params.sort_by,
                    order=params.order,
                    category=params.category,
                )
            )

        logger.debug(
            "Products listed",
            category=params.category,
            sort_by=params.sort_by,
            order=params.order.value,
            page=params.page,
            count=len(snapshots),
            request_id=self.request_id,
        )

        return ProductPage(
            items=[product_from_snapshot(s) for s in snapshots],
            next_cursor=next_cursor,
        )

    async def _resolve_cursor(self, params: ListParams) -> Any:
        """Decode the cursor and load the snapshot it points at."""
        cursor = decode_cursor(params.cursor or "")
        if not cursor.matches(params.sort_by, params.order, params.category):
            raise InvalidCursorError("cursor was issued for a different query")

        try:
            snapshot = await self.repository.get_snapshot(cursor.product_id)
        except ValueError:
            # Firestore rejects IDs that are not a single path segment.
            raise InvalidCursorError("malformed product id") from None

        if snapshot is None:
            raise InvalidCursorError("cursor product no longer exists")

        try:
            snapshot.get(params.sort_by)
        except (KeyError, ValueError):
            raise InvalidCursorError("cursor product has no sort field") from None
        return snapshot

    async def get_product(self, product_id: str) -> dict[str, Any]:
        """Get product by ID.

        Raises:
            ProductNotFoundError: If no product has this ID.
            CatalogUnavailableError: On store failure.
        """
        with self._store_call("get_product", "Failed to fetch product"):
            snapshot = await self.repository.get_snapshot(product_id)

        if snapshot is None:
            raise ProductNotFoundError(product_id)
        return product_from_snapshot(snapshot)

    async def search_products(self, term: str | None) -> list[dict[str, Any]]:
        """Search products by exact keyword.

        Args:
            term: Search term; case and surrounding whitespace are ignored.

        Returns:
            Products whose keyword index contains the term.

        Raises:
            InvalidQueryError: If the term is missing or blank.
            CatalogUnavailableError: On store failure.
        """
        keyword = (term or "").strip().lower()
        if not keyword:
            raise InvalidQueryError("Search term (q) is required")

        with self._store_call("search_products", "Failed to search products"):
            snapshots = await self.repository.find_by_keyword(keyword)

        return [product_from_snapshot(s) for s in snapshots]

    async def filter_products(self, filters: PriceFilter) -> list[dict[str, Any]]:
        """Filter products by price range and brand.

        Raises:
            InvalidQueryError: If a bound is not a number.
            CatalogUnavailableError: On store failure.
        """
        if math.isnan(filters.min_price) or math.isnan(filters.max_price):
            raise InvalidQueryError("Price bounds must be numbers")

        brand = filters.brand.lower() if filters.brand else None

        with self._store_call("filter_products", "Failed to filter products"):
            snapshots = await self.repository.find_by_price(
                min_price=filters.min_price,
                max_price=filters.max_price,
                brand=brand,
                sort_by=filters.sort_by or DEFAULT_SORT_FIELD,
            )

        return [product_from_snapshot(s) for s in snapshots]
