"""Catalog query API over a Firestore product collection."""

__version__ = "0.1.0"
