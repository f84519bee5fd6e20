"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, TimestampMixin
from models.product import (
    ProductResponse,
    ProductListResponse,
    ProductDeleteRequest,
    ProductDeleteResponse,
    BatchCodeResponse,
)
from models.draft import (
    OrderUnit,
    DraftOrderItem,
    DraftItemSave,
    DraftResponse,
    require_positive_quantity,
    parse_unit,
)
from models.history import (
    HistoryItemView,
    HistorySessionView,
    HistoryItemInput,
    HistoryItemUpdate,
    HistoryItemsReplace,
    SessionRename,
    CatalogSelection,
)
from models.catalog_import import ImportPreview, ImportResult
from models.supplier import SupplierSave, SupplierResponse, SupplierDeleteRequest
from models.simple_order import (
    SimpleOrderCreate,
    SimpleOrderUpdate,
    SimpleOrderResponse,
    SimpleSessionResponse,
)

__all__ = [
    "BaseSchema",
    "TimestampMixin",
    "ProductResponse",
    "ProductListResponse",
    "ProductDeleteRequest",
    "ProductDeleteResponse",
    "BatchCodeResponse",
    "OrderUnit",
    "DraftOrderItem",
    "DraftItemSave",
    "DraftResponse",
    "require_positive_quantity",
    "parse_unit",
    "HistoryItemView",
    "HistorySessionView",
    "HistoryItemInput",
    "HistoryItemUpdate",
    "HistoryItemsReplace",
    "SessionRename",
    "CatalogSelection",
    "ImportPreview",
    "ImportResult",
    "SupplierSave",
    "SupplierResponse",
    "SupplierDeleteRequest",
    "SimpleOrderCreate",
    "SimpleOrderUpdate",
    "SimpleOrderResponse",
    "SimpleSessionResponse",
]
