#!/usr/bin/env python3
"""Rebuild product search keywords.

Recomputes the ``searchKeywords`` field of every product from its title.
Products already up to date are left untouched, so the script can be
re-run safely after a partial failure.

Usage:
    python scripts/reindex_keywords.py
    python scripts/reindex_keywords.py --dry-run
    python scripts/reindex_keywords.py --dry-run --json
    python scripts/reindex_keywords.py --concurrency 50 --collection products
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog_api.catalog.keywords import KeywordIndexer, ReindexResult
from catalog_api.catalog.repository import ProductRepository
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.firestore import close_firebase_app, create_firestore_client
from catalog_api.infrastructure.logging_config import configure_logging


async def run_reindex(
    collection: str,
    concurrency: int,
    dry_run: bool,
    client: Any = None,
) -> ReindexResult:
    """Run one reindex pass.

    Args:
        collection: Products collection name.
        concurrency: Maximum writes in flight.
        dry_run: Compute changes without writing.
        client: Firestore client to use. When omitted, one is created for
            the configured project and the Firebase app is closed after.

    Returns:
        Reindex result.
    """
    owns_client = client is None
    if owns_client:
        client = create_firestore_client(settings)
    try:
        indexer = KeywordIndexer(
            ProductRepository(client, collection),
            concurrency=concurrency,
        )
        return await indexer.reindex(dry_run=dry_run)
    finally:
        if owns_client:
            close_firebase_app()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Recompute searchKeywords for all products",
    )
    parser.add_argument(
        "--collection",
        default=settings.products_collection,
        help=f"Products collection (default: {settings.products_collection})",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.reindex_concurrency,
        help=f"Maximum concurrent writes (default: {settings.reindex_concurrency})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the summary as JSON",
    )

    args = parser.parse_args(argv)
    configure_logging(settings.log_level, json_output=settings.log_json)

    if not args.json:
        print("=" * 60)
        print("Catalog Keyword Reindex")
        print("=" * 60)
        print(f"Collection: {args.collection}")
        print(f"Dry run: {args.dry_run}")
        print()

    result = asyncio.run(
        run_reindex(
            collection=args.collection,
            concurrency=args.concurrency,
            dry_run=args.dry_run,
        )
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
        return 0 if result.success else 1

    label = "Would update" if result.dry_run else "Updated"
    print(f"  ✓ Scanned: {result.scanned}")
    print(f"  ✓ {label}: {result.updated}")
    print(f"  ✓ Unchanged: {result.unchanged}")

    if result.failed:
        print(f"  ✗ Failed: {len(result.failed)}")
        for product_id, error in sorted(result.failed.items()):
            print(f"    - {product_id}: {error}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
