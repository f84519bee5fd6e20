"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.imports import router as imports_router
from routes.drafts import router as drafts_router
from routes.history import router as history_router
from routes.suppliers import router as suppliers_router
from routes.simple_orders import router as simple_orders_router

__all__ = [
    "products_router",
    "imports_router",
    "drafts_router",
    "history_router",
    "suppliers_router",
    "simple_orders_router",
]
