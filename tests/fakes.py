"""In-memory stand-in for the async Firestore client.

Implements the subset of the query API the catalog uses: equality, range
and array-contains filters, ordering with document-ID tie-breaks, limits,
``start_after`` cursors, point reads and updates.
"""

import asyncio
import copy
from typing import Any

from google.api_core.exceptions import NotFound

DESCENDING = "DESCENDING"


class FakeSnapshot:
    """Document snapshot."""

    def __init__(self, reference: "FakeDocumentRef", data: dict[str, Any] | None) -> None:
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data)

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict[str, Any] | None:
        return copy.deepcopy(self._data)

    def get(self, field_path: str) -> Any:
        if self._data is None or field_path not in self._data:
            raise KeyError(field_path)
        return copy.deepcopy(self._data[field_path])


class FakeDocumentRef:
    """Document reference."""

    def __init__(self, client: "FakeFirestoreClient", collection: str, doc_id: str) -> None:
        self._client = client
        self._collection = collection
        self.id = doc_id

    async def get(self) -> FakeSnapshot:
        self._client.record(("get", self._collection, self.id))
        if self._client.fail_with is not None:
            raise self._client.fail_with
        docs = self._client.data.setdefault(self._collection, {})
        return FakeSnapshot(self, docs.get(self.id))

    async def update(self, fields: dict[str, Any]) -> None:
        self._client.updates.append((self.id, copy.deepcopy(fields)))
        self._client.in_flight += 1
        self._client.max_in_flight = max(self._client.max_in_flight, self._client.in_flight)
        try:
            await asyncio.sleep(0)
        finally:
            self._client.in_flight -= 1
        failure = self._client.fail_updates.get(self.id)
        if failure is not None:
            raise failure
        docs = self._client.data.setdefault(self._collection, {})
        if self.id not in docs:
            raise NotFound(f"No document to update: {self.id}")
        docs[self.id].update(copy.deepcopy(fields))


class FakeQuery:
    """Immutable query over one collection."""

    def __init__(
        self,
        client: "FakeFirestoreClient",
        collection: str,
        filters: tuple = (),
        orders: tuple = (),
        limit_count: int | None = None,
        cursor: FakeSnapshot | None = None,
    ) -> None:
        self._client = client
        self._collection = collection
        self._filters = filters
        self._orders = orders
        self._limit = limit_count
        self._cursor = cursor

    def _copy(self, **changes: Any) -> "FakeQuery":
        params = {
            "filters": self._filters,
            "orders": self._orders,
            "limit_count": self._limit,
            "cursor": self._cursor,
        }
        params.update(changes)
        return FakeQuery(self._client, self._collection, **params)

    def where(self, *, filter: Any) -> "FakeQuery":
        condition = (filter.field_path, filter.op_string, filter.value)
        return self._copy(filters=self._filters + (condition,))

    def order_by(self, field: str, direction: str = "ASCENDING") -> "FakeQuery":
        return self._copy(orders=self._orders + ((field, direction),))

    def limit(self, count: int) -> "FakeQuery":
        return self._copy(limit_count=count)

    def start_after(self, snapshot: FakeSnapshot) -> "FakeQuery":
        return self._copy(cursor=snapshot)

    def describe(self) -> dict[str, Any]:
        return {
            "collection": self._collection,
            "filters": list(self._filters),
            "orders": list(self._orders),
            "limit": self._limit,
            "start_after": self._cursor.id if self._cursor is not None else None,
        }

    @staticmethod
    def _matches(data: dict[str, Any], field: str, op: str, value: Any) -> bool:
        if field not in data:
            return False
        current = data[field]
        if op == "==":
            return current == value
        if op == "array_contains":
            return isinstance(current, list) and value in current
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            return False
        if op == ">=":
            return current >= value
        if op == "<=":
            return current <= value
        if op == ">":
            return current > value
        if op == "<":
            return current < value
        raise ValueError(f"Unsupported operator: {op}")

    def _sort_key(self, doc_id: str, data: dict[str, Any]) -> tuple:
        return tuple(data[field] for field, _ in self._orders) + (doc_id,)

    def _run(self) -> list[FakeSnapshot]:
        self._client.record(("query", self.describe()))
        if self._client.fail_with is not None:
            raise self._client.fail_with

        docs = self._client.data.setdefault(self._collection, {})
        rows = [
            (doc_id, data)
            for doc_id, data in docs.items()
            if all(self._matches(data, f, op, v) for f, op, v in self._filters)
            and all(field in data for field, _ in self._orders)
        ]

        # Stable multi-key sort, last key first; the document ID breaks
        # ties in the direction of the last explicit ordering.
        tie_direction = self._orders[-1][1] if self._orders else "ASCENDING"
        rows.sort(key=lambda row: row[0], reverse=tie_direction == DESCENDING)
        for field, direction in reversed(self._orders):
            rows.sort(key=lambda row: row[1][field], reverse=direction == DESCENDING)

        if self._cursor is not None:
            cursor_key = self._sort_key(self._cursor.id, self._cursor.to_dict() or {})
            rows = [row for row in rows if self._after(self._sort_key(*row), cursor_key)]

        if self._limit is not None:
            rows = rows[: self._limit]

        return [
            FakeSnapshot(FakeDocumentRef(self._client, self._collection, doc_id), data)
            for doc_id, data in rows
        ]

    def _after(self, key: tuple, cursor_key: tuple) -> bool:
        directions = [d for _, d in self._orders]
        directions.append(directions[-1] if directions else "ASCENDING")
        for value, cursor_value, direction in zip(key, cursor_key, directions):
            if value == cursor_value:
                continue
            if direction == DESCENDING:
                return value < cursor_value
            return value > cursor_value
        return False

    async def get(self) -> list[FakeSnapshot]:
        return self._run()

    async def stream(self):
        for snapshot in self._run():
            yield snapshot


class FakeCollection(FakeQuery):
    """Collection reference."""

    def __init__(self, client: "FakeFirestoreClient", name: str) -> None:
        super().__init__(client, name)

    def document(self, doc_id: str) -> FakeDocumentRef:
        if not doc_id or "/" in doc_id:
            raise ValueError(f"A document must have an even number of path elements: {doc_id!r}")
        return FakeDocumentRef(self._client, self._collection, doc_id)


class FakeFirestoreClient:
    """Async Firestore client double.

    Attributes:
        data: Collection name to {document ID: fields}.
        calls: Every query and point read issued, in order.
        updates: Every (document ID, fields) update attempted.
        fail_with: Exception raised by every query and point read when set.
        fail_updates: Document ID to exception raised by its update.
        in_flight: Updates currently awaiting completion.
        max_in_flight: Highest number of concurrent updates seen.
    """

    def __init__(self, data: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self.data = copy.deepcopy(data) if data else {}
        self.calls: list[tuple] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None
        self.fail_updates: dict[str, Exception] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def record(self, call: tuple) -> None:
        self.calls.append(call)

    @property
    def queries(self) -> list[dict[str, Any]]:
        return [call[1] for call in self.calls if call[0] == "query"]

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)
