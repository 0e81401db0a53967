"""Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_api.api.health import router as health_router
from catalog_api.api.middleware import error_response, setup_middleware
from catalog_api.api.products import router as products_router
from catalog_api.domain.exceptions import (
    CatalogError,
    CatalogUnavailableError,
    InvalidQueryError,
    ProductNotFoundError,
)
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.firestore import close_firebase_app, create_firestore_client
from catalog_api.infrastructure.logging_config import configure_logging

configure_logging(settings.log_level, json_output=settings.log_json)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Creates the Firestore client once per process and stores it on
    ``app.state`` for request handlers.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting Catalog API",
        version=settings.api_version,
        debug=settings.debug,
        collection=settings.products_collection,
    )

    app.state.firestore = create_firestore_client(settings)

    yield

    logger.info("Shutting down Catalog API")
    app.state.firestore = None
    close_firebase_app()


app = FastAPI(
    title="Catalog API",
    description="Product listing, lookup, search and filtering over Firestore",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# CORS middleware is outermost so error responses carry CORS headers too
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Next-Cursor"],
)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def _status_for(exc: CatalogError) -> int:
    if isinstance(exc, InvalidQueryError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ProductNotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Map catalog errors to HTTP responses."""
    status_code = _status_for(exc)

    if isinstance(exc, CatalogUnavailableError):
        # Store details were already logged where the fault was caught.
        logger.error(
            "Catalog request failed",
            path=request.url.path,
            error=exc.message,
        )
    elif status_code < 500:
        logger.info(
            "Catalog request rejected",
            path=request.url.path,
            error=exc.message,
            details=exc.details,
        )

    return error_response(request, status_code, exc.message, exc.error_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report invalid query parameters as client errors."""
    message = "; ".join(
        f"{error['loc'][-1]}: {error['msg']}" for error in exc.errors()
    )
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        message or "Invalid request",
        "VALIDATION_ERROR",
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    return error_response(request, exc.status_code, str(exc.detail), "ERROR")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog_api.main:app", host=settings.host, port=settings.port)
