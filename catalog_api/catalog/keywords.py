"""Search keyword index maintenance.

Products carry a derived ``searchKeywords`` array built from the title.
It is refreshed by an explicit batch pass rather than on every write, so
it may lag behind the title between runs.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog

from catalog_api.catalog.models import FIELD_SEARCH_KEYWORDS, FIELD_TITLE
from catalog_api.catalog.repository import ProductRepository

logger = structlog.get_logger()


def derive_keywords(title: str) -> list[str]:
    """Derive search keywords from a product title.

    Lowercases the title and splits it on whitespace. Duplicates are
    dropped, keeping the first occurrence.

    Example:
        >>> derive_keywords("Red  Running Shoe red")
        ['red', 'running', 'shoe']
    """
    return list(dict.fromkeys(title.lower().split()))


@dataclass
class ReindexResult:
    """Outcome of a keyword reindex pass.

    Attributes:
        scanned: Products read.
        updated: Products whose keywords were written.
        unchanged: Products already up to date.
        failed: Product ID to error message for products that could not
            be processed.
        dry_run: Whether writes were skipped.
    """

    scanned: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: dict[str, str] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        """True when no product failed."""
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "scanned": self.scanned,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "failed": dict(self.failed),
            "dry_run": self.dry_run,
        }


class KeywordIndexer:
    """Recomputes ``searchKeywords`` for every product.

    Every write is awaited before the pass reports completion, with at
    most ``concurrency`` writes in flight. A failing product is recorded
    in the result and does not stop the pass. Products whose stored
    keywords already match are not written, so repeated runs are no-ops.
    """

    def __init__(self, repository: ProductRepository, concurrency: int = 20) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.repository = repository
        self.concurrency = concurrency

    async def reindex(self, dry_run: bool = False) -> ReindexResult:
        """Run a full reindex pass.

        Args:
            dry_run: Compute changes without writing them.

        Returns:
            Pass summary.
        """
        result = ReindexResult(dry_run=dry_run)
        semaphore = asyncio.Semaphore(self.concurrency)
        in_flight: set[asyncio.Task] = set()

        logger.info(
            "Keyword reindex started",
            collection=self.repository.collection_name,
            dry_run=dry_run,
        )

        async def write(product_id: str, keywords: list[str]) -> None:
            try:
                await self.repository.update_fields(
                    product_id, {FIELD_SEARCH_KEYWORDS: keywords}
                )
            except Exception as e:
                result.failed[product_id] = str(e) or type(e).__name__
                logger.warning(
                    "Failed to update keywords",
                    product_id=product_id,
                    error=str(e),
                )
            else:
                result.updated += 1
            finally:
                semaphore.release()

        try:
            async for snapshot in self.repository.stream_all():
                result.scanned += 1
                data = snapshot.to_dict() or {}
                title = data.get(FIELD_TITLE)

                if not isinstance(title, str):
                    result.failed[snapshot.id] = "missing or non-string title"
                    logger.warning(
                        "Product has no usable title",
                        product_id=snapshot.id,
                    )
                    continue

                keywords = derive_keywords(title)
                if data.get(FIELD_SEARCH_KEYWORDS) == keywords:
                    result.unchanged += 1
                    continue

                if dry_run:
                    result.updated += 1
                    continue

                # A slot is taken before the task exists, so at most
                # ``concurrency`` write tasks are alive at any time.
                await semaphore.acquire()
                task = asyncio.ensure_future(write(snapshot.id, keywords))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
        finally:
            # Writes already started must settle even if streaming failed.
            await asyncio.gather(*in_flight)

        logger.info(
            "Keyword reindex complete",
            scanned=result.scanned,
            updated=result.updated,
            unchanged=result.unchanged,
            failed=len(result.failed),
            dry_run=dry_run,
        )
        return result
