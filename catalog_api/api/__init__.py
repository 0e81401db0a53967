"""API layer module.

Contains FastAPI routers, middleware and response schemas.
"""

from catalog_api.api.health import router as health_router
from catalog_api.api.products import router as products_router

__all__ = [
    "health_router",
    "products_router",
]
