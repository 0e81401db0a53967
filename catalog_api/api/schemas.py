"""API schemas for the catalog API.

Pydantic models for response serialization and documentation.
"""

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """Product document.

    Products are schemaless; fields beyond the ones listed here are passed
    through unchanged.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Document ID")
    title: str | None = Field(default=None, description="Product title")
    price: int | float | None = Field(default=None, description="Unit price")
    brand: str | None = Field(default=None, description="Brand, stored lowercase")
    category: str | None = Field(default=None, description="Category name")
    searchKeywords: list[str] | None = Field(
        default=None, description="Lowercase title tokens used by search"
    )
