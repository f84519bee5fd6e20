"""
Supplier schemas.
"""

from pydantic import Field

from models.base import BaseSchema, TimestampMixin


class SupplierSave(BaseSchema):
    """Create or rename a supplier."""

    name: str = Field(..., min_length=1, max_length=200)


class SupplierResponse(BaseSchema, TimestampMixin):
    """Supplier row."""

    id: str
    name: str


class SupplierDeleteRequest(BaseSchema):
    """Bulk supplier deletion."""

    ids: list[str] = Field(..., min_length=1)
