"""
Simple order schemas.

The simple variant is a free-text order sheet: no catalog link, one open
session at a time.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import BaseSchema, TimestampMixin


class SimpleOrderCreate(BaseSchema):
    """Add a line to the open simple session."""

    product_name: str = Field(..., min_length=1)
    company_name: str = Field("")
    quantity: float = Field(..., gt=0)


class SimpleOrderUpdate(BaseSchema):
    """Partial update of a simple order line."""

    product_name: Optional[str] = Field(None, min_length=1)
    company_name: Optional[str] = None
    quantity: Optional[float] = Field(None, gt=0)


class SimpleOrderResponse(BaseSchema, TimestampMixin):
    """Simple order line."""

    id: str
    session_id: str
    product_name: str
    company_name: Optional[str] = ""
    quantity: float


class SimpleSessionResponse(BaseSchema, TimestampMixin):
    """Simple order session; ended_at is None while open."""

    id: str
    ended_at: Optional[datetime] = None
