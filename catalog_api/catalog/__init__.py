"""Product Catalog.

Firestore-backed product queries: listing with pagination, lookup,
keyword search, price filtering and keyword index maintenance.
"""

from catalog_api.catalog.cursor import PageCursor, decode_cursor, encode_cursor
from catalog_api.catalog.keywords import KeywordIndexer, ReindexResult, derive_keywords
from catalog_api.catalog.models import SortOrder, product_from_snapshot
from catalog_api.catalog.repository import ProductRepository
from catalog_api.catalog.service import CatalogService, ListParams, PriceFilter, ProductPage

__all__ = [
    # Models
    "SortOrder",
    "product_from_snapshot",
    # Cursor
    "PageCursor",
    "decode_cursor",
    "encode_cursor",
    # Repository
    "ProductRepository",
    # Service
    "CatalogService",
    "ListParams",
    "PriceFilter",
    "ProductPage",
    # Keywords
    "KeywordIndexer",
    "ReindexResult",
    "derive_keywords",
]
