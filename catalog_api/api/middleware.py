"""API middleware for the catalog API.

Provides:
- Request ID correlation and per-request access logging
- The JSON error body shared by every error path
- A catch-all for exceptions no handler claimed
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

INTERNAL_ERROR_MESSAGE = "An internal error occurred"
INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


def error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: str,
) -> JSONResponse:
    """Build the catalog error body.

    Args:
        request: Request being answered; supplies the correlation ID.
        status_code: HTTP status.
        message: Client-facing message, without store internals.
        error_code: Machine-readable error code.

    Returns:
        ``{"error", "error_code", "request_id"}`` JSON response.
    """
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "error_code": error_code,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation ID.

    The ID comes from the ``X-Request-ID`` header or is generated. It is
    stored on ``request.state`` for the catalog service, bound into the
    structlog context and echoed on the response.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000

            # Catalog routes are driven by query parameters, so log them.
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                query=request.url.query or None,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
            )

            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id

        return response


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns exceptions that escaped every handler into a generic 500.

    Catalog errors, validation errors and HTTP errors have their own
    handlers in ``main``; anything reaching this layer is a bug, so the
    client only sees the generic message.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                error=str(e),
            )

            return error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                INTERNAL_ERROR_MESSAGE,
                INTERNAL_ERROR_CODE,
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure request ID and error handling middleware.

    Middleware is added in reverse order (last added = outermost), so
    request IDs are bound before the error handler runs.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)
