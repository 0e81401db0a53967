"""Product API endpoints.

Provides read-only endpoints over the product catalog:
- GET /products - list products (filtered, sorted, paginated)
- GET /product/{product_id} - product details
- GET /products/search - keyword search
- GET /products/filter - price range and brand filter
"""

import math
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query, Response, status

from catalog_api.api.dependencies import get_catalog_service
from catalog_api.api.schemas import ErrorResponse, ProductSchema
from catalog_api.catalog.models import DEFAULT_SORT_FIELD, SortOrder
from catalog_api.catalog.service import CatalogService, ListParams, PriceFilter
from catalog_api.infrastructure.config import settings

router = APIRouter(tags=["Products"])

NEXT_CURSOR_HEADER = "X-Next-Cursor"

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Bad request"},
    500: {"model": ErrorResponse, "description": "Server error"},
}


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/products",
    response_model=None,
    status_code=status.HTTP_200_OK,
    responses={200: {"model": list[ProductSchema]}, **ERROR_RESPONSES},
    summary="Get all products",
    description=(
        "List products, optionally filtered by category, sorted by any field "
        "and paginated by page number or by the cursor returned in the "
        f"`{NEXT_CURSOR_HEADER}` header."
    ),
)
async def list_products(
    response: Response,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    category: Annotated[
        str | None, Query(description="Filter products by category")
    ] = None,
    sort_by: Annotated[
        str, Query(alias="sortBy", min_length=1, description="Sort by a specific field")
    ] = DEFAULT_SORT_FIELD,
    order: Annotated[
        SortOrder, Query(description="Order of sorting (asc/desc)")
    ] = SortOrder.ASC,
    limit: Annotated[
        int,
        Query(ge=1, le=settings.max_page_size, description="Number of products to return"),
    ] = settings.default_page_size,
    page: Annotated[
        int, Query(ge=1, description="Page number for pagination")
    ] = 1,
    cursor: Annotated[
        str | None,
        Query(description="Cursor from a previous page; takes precedence over page"),
    ] = None,
) -> list[dict[str, Any]]:
    """List products.

    Returns:
        Products on the requested page. When the page is full, the
        response carries a cursor for the next page.
    """
    result = await service.list_products(
        ListParams(
            category=category or None,
            sort_by=sort_by,
            order=order,
            limit=limit,
            page=page,
            cursor=cursor or None,
        )
    )

    if result.next_cursor:
        response.headers[NEXT_CURSOR_HEADER] = result.next_cursor

    return result.items


@router.get(
    "/product/{product_id}",
    response_model=None,
    status_code=status.HTTP_200_OK,
    responses={
        200: {"model": ProductSchema},
        404: {"model": ErrorResponse, "description": "Product not found"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
    summary="Get a product by ID",
)
async def get_product(
    product_id: Annotated[str, Path(description="ID of the product to fetch")],
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> dict[str, Any]:
    """Get product details.

    Raises:
        ProductNotFoundError: If the product doesn't exist.
    """
    return await service.get_product(product_id)


@router.get(
    "/products/search",
    response_model=None,
    status_code=status.HTTP_200_OK,
    responses={200: {"model": list[ProductSchema]}, **ERROR_RESPONSES},
    summary="Search for products",
    description="Match a single lowercase keyword against product titles.",
)
async def search_products(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    q: Annotated[str | None, Query(description="Search term")] = None,
) -> list[dict[str, Any]]:
    """Search products by keyword.

    Raises:
        InvalidQueryError: If ``q`` is missing or blank.
    """
    return await service.search_products(q)


@router.get(
    "/products/filter",
    response_model=None,
    status_code=status.HTTP_200_OK,
    responses={200: {"model": list[ProductSchema]}, **ERROR_RESPONSES},
    summary="Filter products",
)
async def filter_products(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
    min_price: Annotated[
        float, Query(alias="minPrice", description="Minimum price for filtering")
    ] = 0.0,
    max_price: Annotated[
        float | None,
        Query(alias="maxPrice", description="Maximum price for filtering"),
    ] = None,
    brand: Annotated[str | None, Query(description="Filter by brand")] = None,
    sort: Annotated[
        str, Query(min_length=1, description="Sort by price or rating")
    ] = DEFAULT_SORT_FIELD,
) -> list[dict[str, Any]]:
    """Filter products by inclusive price range and brand."""
    return await service.filter_products(
        PriceFilter(
            min_price=min_price,
            max_price=math.inf if max_price is None else max_price,
            brand=brand or None,
            sort_by=sort,
        )
    )
