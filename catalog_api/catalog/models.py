"""Product document helpers.

Products are schemaless Firestore documents; this module names the fields
the catalog queries on and converts snapshots into API payloads.
"""

from enum import Enum
from typing import Any

from google.cloud.firestore import Query
from google.cloud.firestore_v1.base_document import DocumentSnapshot

# Field names in the products collection
FIELD_TITLE = "title"
FIELD_PRICE = "price"
FIELD_BRAND = "brand"
FIELD_CATEGORY = "category"
FIELD_SEARCH_KEYWORDS = "searchKeywords"

DEFAULT_SORT_FIELD = FIELD_PRICE


class SortOrder(str, Enum):
    """Sort direction accepted by the list endpoint."""

    ASC = "asc"
    DESC = "desc"

    @property
    def direction(self) -> str:
        """Firestore direction constant for this order."""
        if self is SortOrder.DESC:
            return Query.DESCENDING
        return Query.ASCENDING


def product_from_snapshot(snapshot: DocumentSnapshot) -> dict[str, Any]:
    """Convert a document snapshot into a product payload.

    The document ID is always exposed as ``id``, overriding any stored
    field of the same name.

    Args:
        snapshot: Firestore document snapshot.

    Returns:
        Product fields plus ``id``.
    """
    data = snapshot.to_dict() or {}
    return {**data, "id": snapshot.id}
