"""
Catalog import schemas.
"""

from pydantic import Field

from models.base import BaseSchema


class ImportPreview(BaseSchema):
    """Parse and match outcome before anything is written."""

    company_name: str
    batch_code: str = Field(..., description="Batch code the import would use")
    product_count: int = Field(..., description="Names parsed from the spreadsheet")
    image_count: int = Field(..., description="Images indexed from the archive")
    matched_count: int = Field(..., description="Products that found an image")
    unmatched_names: list[str] = Field(default_factory=list)
    requires_confirmation: bool = Field(
        ...,
        description="Archive supplied but no image matched any product"
    )


class ImportResult(BaseSchema):
    """Completed import."""

    batch_code: str
    next_batch_code: str
    products_written: int
    total: int
    image_count: int
    matched_count: int
    message: str
