"""Shared fixtures for catalog API tests."""

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from catalog_api.catalog.repository import ProductRepository
from catalog_api.infrastructure.config import settings
from catalog_api.main import app
from tests.fakes import FakeFirestoreClient


def make_product(
    title: str,
    price: float,
    brand: str,
    category: str,
    rating: float = 4.0,
) -> dict[str, Any]:
    """Build a product document with its keyword index filled in."""
    return {
        "title": title,
        "price": price,
        "brand": brand,
        "category": category,
        "rating": rating,
        "searchKeywords": title.lower().split(),
    }


@pytest.fixture
def products() -> dict[str, dict[str, Any]]:
    """Small catalog spanning two categories and three brands."""
    return {
        "A": make_product("Red Running Shoe", 5, "acme", "shoes", rating=4.5),
        "B": make_product("Blue Denim Jacket", 20, "acme", "apparel", rating=3.9),
        "C": make_product("Red Wool Scarf", 45, "globex", "apparel", rating=4.8),
        "D": make_product("Trail Running Shoe", 60, "initech", "shoes", rating=4.1),
    }


@pytest.fixture
def firestore(products: dict[str, dict[str, Any]]) -> FakeFirestoreClient:
    """In-memory Firestore seeded with the sample catalog."""
    return FakeFirestoreClient({settings.products_collection: products})


@pytest.fixture
def repository(firestore: FakeFirestoreClient) -> ProductRepository:
    """Repository over the in-memory Firestore."""
    return ProductRepository(firestore, settings.products_collection)


@pytest.fixture
def client(firestore: FakeFirestoreClient) -> Iterator[TestClient]:
    """Test client wired to the in-memory Firestore."""
    app.state.firestore = firestore
    try:
        yield TestClient(app)
    finally:
        app.state.firestore = None
