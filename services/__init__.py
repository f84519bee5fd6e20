"""
Business logic services.

Each service handles one domain area.
"""

from services.product_service import ProductService, get_product_service
from services.catalog_import_service import (
    BatchCodeCounter,
    BatchIngestWriter,
    CatalogImportService,
    MatchResult,
    get_catalog_import_service,
    match_products,
    requires_confirmation,
)
from services.draft_cache import DraftCache, get_draft_cache
from services.draft_service import (
    OrderDraftStore,
    get_draft_store,
    purge_products_from_drafts,
)
from services.order_archive_service import OrderArchiver, get_order_archiver
from services.history_service import (
    HistoryEditor,
    HistoryRepairReader,
    get_history_editor,
    get_history_reader,
)
from services.export_service import ExportService, get_export_service
from services.supplier_service import SupplierService, get_supplier_service
from services.simple_order_service import SimpleOrderService, get_simple_order_service

__all__ = [
    "ProductService",
    "get_product_service",
    "BatchCodeCounter",
    "BatchIngestWriter",
    "CatalogImportService",
    "MatchResult",
    "get_catalog_import_service",
    "match_products",
    "requires_confirmation",
    "DraftCache",
    "get_draft_cache",
    "OrderDraftStore",
    "get_draft_store",
    "purge_products_from_drafts",
    "OrderArchiver",
    "get_order_archiver",
    "HistoryEditor",
    "HistoryRepairReader",
    "get_history_editor",
    "get_history_reader",
    "ExportService",
    "get_export_service",
    "SupplierService",
    "get_supplier_service",
    "SimpleOrderService",
    "get_simple_order_service",
]
