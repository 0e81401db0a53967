"""Tests for API middleware and error rendering."""

import json
from unittest.mock import patch

from fastapi import Request
from fastapi.testclient import TestClient

from catalog_api.api.middleware import error_response
from catalog_api.catalog.service import CatalogService


class TestRequestIdMiddleware:
    """Tests for request ID correlation."""

    def test_generates_request_id(self, client: TestClient) -> None:
        """Should add a request ID when none is sent."""
        response = client.get("/health")
        assert response.headers.get("X-Request-ID")

    def test_echoes_request_id(self, client: TestClient) -> None:
        """Should echo a client-supplied request ID."""
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_in_error_body(self, client: TestClient) -> None:
        """Error bodies carry the request ID."""
        response = client.get("/product/missing", headers={"X-Request-ID": "req-404"})
        assert response.status_code == 404
        assert response.json() == {
            "error": "Product not found",
            "error_code": "PRODUCT_NOT_FOUND",
            "request_id": "req-404",
        }


class TestErrorHandling:
    """Tests for uniform error responses."""

    def test_unexpected_exception(self, client: TestClient) -> None:
        """Unhandled exceptions become a generic 500."""
        with patch.object(
            CatalogService, "get_product", side_effect=RuntimeError("boom")
        ):
            response = client.get("/product/A", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "An internal error occurred",
            "error_code": "INTERNAL_ERROR",
            "request_id": "req-500",
        }

    def test_unknown_route(self, client: TestClient) -> None:
        """Unknown paths use the same error format."""
        response = client.get("/nope")
        assert response.status_code == 404
        assert "error" in response.json()

    def test_cors_headers(self, client: TestClient) -> None:
        """Cross-origin requests are allowed."""
        response = client.get("/products", headers={"Origin": "https://shop.example"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_cors_headers_on_unexpected_exception(self, client: TestClient) -> None:
        """Browsers can read the generic 500 body cross-origin."""
        with patch.object(
            CatalogService, "get_product", side_effect=RuntimeError("boom")
        ):
            response = client.get(
                "/product/A", headers={"Origin": "https://shop.example"}
            )

        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers.get("X-Request-ID")

    def test_cors_headers_on_client_error(self, client: TestClient) -> None:
        """Validation failures keep CORS headers."""
        response = client.get(
            "/products?limit=0", headers={"Origin": "https://shop.example"}
        )
        assert response.status_code == 400
        assert response.headers["access-control-allow-origin"] == "*"


class TestErrorResponse:
    """Tests for the shared error body."""

    def test_body_shape(self) -> None:
        request = Request({"type": "http", "state": {"request_id": "req-1"}})

        response = error_response(request, 418, "Short and stout", "TEAPOT")

        assert response.status_code == 418
        assert json.loads(response.body) == {
            "error": "Short and stout",
            "error_code": "TEAPOT",
            "request_id": "req-1",
        }

    def test_without_request_id(self) -> None:
        request = Request({"type": "http"})

        response = error_response(request, 500, "An internal error occurred", "INTERNAL_ERROR")

        assert json.loads(response.body)["request_id"] is None
