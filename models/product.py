"""
Catalog product schemas for validation and serialization.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, TimestampMixin


class ProductResponse(BaseSchema, TimestampMixin):
    """
    Catalog product.

    Created only by the batch importer; image_url holds a data URI.
    """

    id: str = Field(..., description="Product UUID")
    name: str = Field(..., description="Product name as imported")
    image_url: Optional[str] = Field(None, description="Image data URI")
    company_name: str = Field(..., description="Supplier company name")
    batch_code: str = Field(..., description="4-digit import batch code")


class ProductListResponse(BaseSchema):
    """List of catalog products."""

    data: list[ProductResponse]
    total: int


class ProductDeleteRequest(BaseSchema):
    """Bulk product deletion."""

    ids: list[str] = Field(
        ...,
        min_length=1,
        description="Product UUIDs to delete"
    )


class ProductDeleteResponse(BaseSchema):
    """Result of a product deletion."""

    deleted: int
    draft_lines_removed: int


class BatchCodeResponse(BaseSchema):
    """Last used and next pending batch codes."""

    last_batch_code: str = Field(..., examples=["0007"])
    next_batch_code: str = Field(..., examples=["0008"])
