"""Opaque pagination cursors for the product list.

A cursor names the last product of a page together with the ordering it
was produced under, so the next page can resume with a single point read
instead of replaying every earlier page.
"""

import base64
import binascii
import json
from dataclasses import asdict, dataclass

from catalog_api.catalog.models import SortOrder
from catalog_api.domain.exceptions import InvalidCursorError


@dataclass(frozen=True)
class PageCursor:
    """Decoded cursor contents.

    Attributes:
        product_id: ID of the last product on the previous page.
        sort_by: Sort field the page was ordered by.
        order: Sort direction the page was ordered by.
        category: Category filter the page was produced for.
    """

    product_id: str
    sort_by: str
    order: SortOrder
    category: str | None = None

    def matches(self, sort_by: str, order: SortOrder, category: str | None) -> bool:
        """Check the cursor was issued for the same ordering and filter."""
        return (
            self.sort_by == sort_by
            and self.order == order
            and self.category == category
        )


def encode_cursor(cursor: PageCursor) -> str:
    """Serialize a cursor into a URL-safe token."""
    payload = asdict(cursor)
    payload["order"] = cursor.order.value
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(token: str) -> PageCursor:
    """Parse a cursor token.

    Args:
        token: Token previously produced by :func:`encode_cursor`.

    Returns:
        Decoded cursor.

    Raises:
        InvalidCursorError: If the token is not a well-formed cursor.
    """
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(raw)
    except (binascii.Error, UnicodeError, ValueError):
        raise InvalidCursorError("malformed token") from None

    if not isinstance(payload, dict):
        raise InvalidCursorError("malformed token")

    product_id = payload.get("product_id")
    sort_by = payload.get("sort_by")
    category = payload.get("category")
    if not isinstance(product_id, str) or not product_id:
        raise InvalidCursorError("missing product id")
    if not isinstance(sort_by, str) or not sort_by:
        raise InvalidCursorError("missing sort field")
    if category is not None and not isinstance(category, str):
        raise InvalidCursorError("malformed category")

    try:
        order = SortOrder(payload.get("order"))
    except ValueError:
        raise InvalidCursorError("unknown sort order") from None

    return PageCursor(
        product_id=product_id,
        sort_by=sort_by,
        order=order,
        category=category,
    )
