"""
Draft order (cart) schemas for validation and serialization.
"""

import math
from enum import Enum
from typing import Any

from pydantic import Field

from models.base import BaseSchema
from exceptions import InvalidQuantityError, InvalidUnitError


class OrderUnit(str, Enum):
    """Unit an order quantity is counted in."""
    CASE = "case"
    PIECE = "piece"


def require_positive_quantity(quantity: Any) -> float:
    """
    Coerce an order quantity to float.

    Raises:
        InvalidQuantityError: If not a finite number greater than zero
    """
    try:
        value = float(quantity)
    except (TypeError, ValueError):
        raise InvalidQuantityError(quantity)
    if math.isnan(value) or math.isinf(value) or value <= 0:
        raise InvalidQuantityError(quantity)
    return value


def parse_unit(unit: Any) -> OrderUnit:
    """
    Coerce a unit to OrderUnit. None means the default, case.

    Raises:
        InvalidUnitError: If not case or piece
    """
    if unit is None or unit == "":
        return OrderUnit.CASE
    if isinstance(unit, OrderUnit):
        return unit
    try:
        return OrderUnit(str(unit).strip().lower())
    except ValueError:
        raise InvalidUnitError(unit)


class DraftOrderItem(BaseSchema):
    """
    One line of the in-progress order.

    At most one per product; keyed by product_id in the draft mapping.
    """

    id: str = Field(..., description="Draft line UUID")
    product_id: str = Field(..., description="Catalog product UUID")
    stock: str = Field("", description="Free-text stock note")
    quantity: float = Field(..., gt=0, description="Ordered quantity")
    unit: OrderUnit = Field(OrderUnit.CASE, description="case or piece")


class DraftItemSave(BaseSchema):
    """Create or overwrite the draft line for a product."""

    stock: str = Field("", max_length=200, description="Free-text stock note")
    quantity: float = Field(..., gt=0, description="Ordered quantity")
    unit: OrderUnit = Field(OrderUnit.CASE, description="case or piece")


class DraftResponse(BaseSchema):
    """Current draft mapping for one browsing context."""

    items: dict[str, DraftOrderItem]
    count: int
