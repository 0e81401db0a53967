"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    cors_allow_origins: list[str] = ["*"]

    # Firestore
    firebase_credentials: str | None = None  # path to service account JSON
    firebase_key: str | None = None  # inline service account JSON
    firebase_project_id: str | None = None
    firestore_database: str | None = None
    products_collection: str = "products"

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Maintenance
    reindex_concurrency: int = 20

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
