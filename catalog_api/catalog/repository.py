"""Product repository for Firestore queries.

Builds ordered, filtered and cursor-bounded queries over the products
collection.
"""

from collections.abc import AsyncIterator
from typing import Any

from google.cloud.firestore import AsyncClient
from google.cloud.firestore_v1.base_document import DocumentSnapshot
from google.cloud.firestore_v1.base_query import FieldFilter

from catalog_api.catalog.models import (
    FIELD_BRAND,
    FIELD_CATEGORY,
    FIELD_PRICE,
    FIELD_SEARCH_KEYWORDS,
    SortOrder,
)


class ProductRepository:
    """Repository for product queries against Firestore.

    Example usage:
        repo = ProductRepository(client, "products")
        docs = await repo.find_page(
            category="shoes",
            sort_by="price",
            order=SortOrder.ASC,
            limit=10,
        )
    """

    def __init__(self, client: AsyncClient, collection_name: str = "products") -> None:
        """Initialize repository with a Firestore client.

        Args:
            client: Async Firestore client.
            collection_name: Name of the products collection.
        """
        self.client = client
        self.collection_name = collection_name

    @property
    def collection(self) -> Any:
        """Products collection reference."""
        return self.client.collection(self.collection_name)

    def _ordered_query(
        self,
        category: str | None,
        sort_by: str,
        order: SortOrder,
    ) -> Any:
        """Base list query: optional category filter plus ordering."""
        query = self.collection
        if category:
            query = query.where(filter=FieldFilter(FIELD_CATEGORY, "==", category))
        return query.order_by(sort_by, direction=order.direction)

    async def find_page(
        self,
        category: str | None,
        sort_by: str,
        order: SortOrder,
        limit: int,
        start_after: DocumentSnapshot | None = None,
    ) -> list[DocumentSnapshot]:
        """Fetch one ordered page of products.

        Args:
            category: Optional category equality filter.
            sort_by: Field to order by.
            order: Sort direction.
            limit: Maximum number of documents.
            start_after: Snapshot to resume strictly after.

        Returns:
            Matching document snapshots in query order.
        """
        query = self._ordered_query(category, sort_by, order).limit(limit)
        if start_after is not None:
            query = query.start_after(start_after)
        return list(await query.get())

    async def get_snapshot(self, product_id: str) -> DocumentSnapshot | None:
        """Get a product snapshot by document ID.

        Returns:
            Snapshot if the document exists, None otherwise.
        """
        snapshot = await self.collection.document(product_id).get()
        if not snapshot.exists:
            return None
        return snapshot

    async def find_by_keyword(self, keyword: str) -> list[DocumentSnapshot]:
        """Find products whose keyword index contains ``keyword`` exactly."""
        query = self.collection.where(
            filter=FieldFilter(FIELD_SEARCH_KEYWORDS, "array_contains", keyword)
        )
        return list(await query.get())

    async def find_by_price(
        self,
        min_price: float,
        max_price: float,
        brand: str | None = None,
        sort_by: str = FIELD_PRICE,
    ) -> list[DocumentSnapshot]:
        """Find products in an inclusive price range.

        Args:
            min_price: Lower price bound (inclusive).
            max_price: Upper price bound (inclusive).
            brand: Optional brand equality filter, matched as given.
            sort_by: Field to order by, ascending.

        Returns:
            Matching document snapshots.
        """
        query = self.collection.where(
            filter=FieldFilter(FIELD_PRICE, ">=", min_price)
        ).where(filter=FieldFilter(FIELD_PRICE, "<=", max_price))

        if brand:
            query = query.where(filter=FieldFilter(FIELD_BRAND, "==", brand))

        query = query.order_by(sort_by)
        return list(await query.get())

    def stream_all(self) -> AsyncIterator[DocumentSnapshot]:
        """Stream every product in the collection."""
        return self.collection.stream()

    async def update_fields(self, product_id: str, fields: dict[str, Any]) -> None:
        """Update selected fields of a product document."""
        await self.collection.document(product_id).update(fields)

    async def ping(self) -> None:
        """Issue a minimal read to verify the store is reachable."""
        await self.collection.limit(1).get()
