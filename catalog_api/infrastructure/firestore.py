"""Firestore client construction.

Initializes the Firebase app once per process and hands out the async
Firestore client used by the catalog repository.
"""

import json

import firebase_admin
import structlog
from firebase_admin import credentials, firestore_async
from google.cloud.firestore import AsyncClient

from catalog_api.infrastructure.config import Settings

logger = structlog.get_logger()


def _load_credentials(settings: Settings) -> credentials.Base:
    """Resolve Firebase credentials.

    Inline service-account JSON wins over a credentials file; without
    either, application default credentials are used.
    """
    if settings.firebase_key:
        return credentials.Certificate(json.loads(settings.firebase_key))
    if settings.firebase_credentials:
        return credentials.Certificate(settings.firebase_credentials)
    return credentials.ApplicationDefault()


def init_firebase_app(settings: Settings) -> firebase_admin.App:
    """Initialize (or reuse) the default Firebase app."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    app = firebase_admin.initialize_app(_load_credentials(settings), options or None)
    logger.info(
        "Firebase app initialized",
        project_id=app.project_id,
    )
    return app


def create_firestore_client(settings: Settings) -> AsyncClient:
    """Create the async Firestore client for the configured database.

    Args:
        settings: Application settings.

    Returns:
        Async Firestore client bound to the default Firebase app.
    """
    app = init_firebase_app(settings)
    if settings.firestore_database:
        return firestore_async.client(app, database_id=settings.firestore_database)
    return firestore_async.client(app)


def close_firebase_app() -> None:
    """Tear down the default Firebase app if it was initialized."""
    try:
        app = firebase_admin.get_app()
    except ValueError:
        return
    firebase_admin.delete_app(app)
