"""
Order history schemas.

Line items carry a denormalized snapshot of product name, company and image
taken when they were written. Views returned to callers have that snapshot
repaired against the live catalog.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, TimestampMixin
from models.draft import DraftOrderItem, OrderUnit


class HistoryItemView(BaseSchema):
    """Archived line item with display fields resolved."""

    id: str
    session_id: str
    product_id: Optional[str] = None
    product_name: str
    company_name: str
    image_url: Optional[str] = None
    stock: str = ""
    quantity: float
    unit: OrderUnit = OrderUnit.CASE


class HistorySessionView(BaseSchema, TimestampMixin):
    """Archived order session with its line items."""

    id: str = Field(..., description="Session row UUID")
    session_id: Optional[str] = Field(None, description="Generated session label")
    name: Optional[str] = Field(None, description="Optional display name")
    timestamp: str = Field(..., description="Archive time, YYYY-MM-DD HH:MM:SS")
    items: list[HistoryItemView] = Field(default_factory=list)


class HistoryItemInput(BaseSchema):
    """
    A line item written directly into a session.

    Used for manual appends (no product_id) and bulk replacement sets.
    """

    product_id: Optional[str] = Field(None, description="Catalog product UUID, if any")
    product_name: str = Field(..., min_length=1, description="Product name snapshot")
    company_name: str = Field("", description="Company name snapshot")
    image_url: Optional[str] = Field(None, description="Image snapshot")
    stock: str = Field("", description="Free-text stock note")
    quantity: float = Field(..., gt=0)
    unit: OrderUnit = Field(OrderUnit.CASE)


class HistoryItemUpdate(BaseSchema):
    """Overwrite quantity and/or stock note of one line item."""

    quantity: Optional[float] = Field(None, gt=0)
    stock: Optional[str] = None


class HistoryItemsReplace(BaseSchema):
    """
    Replacement item set for a session.

    Any existing item left out of this list is permanently deleted.
    """

    items: list[HistoryItemInput]


class SessionRename(BaseSchema):
    """Set a session's display name."""

    name: str = Field(..., max_length=200)


class CatalogSelection(BaseSchema):
    """
    Redirect into the catalog flow for revising an archived session.

    items holds the session's catalog-linked lines keyed by product_id so the
    caller can preload its selection; manual_items are lines without a
    product reference. Committing goes through the bulk replace endpoint.
    """

    session_id: str
    items: dict[str, DraftOrderItem] = Field(default_factory=dict)
    manual_items: list[HistoryItemView] = Field(default_factory=list)
