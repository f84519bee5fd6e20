"""
Supplier API routes.
"""

from fastapi import APIRouter
import structlog

from models.supplier import SupplierDeleteRequest, SupplierResponse, SupplierSave
from routes.errors import handle_error
from services.supplier_service import get_supplier_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=list[SupplierResponse])
async def list_suppliers():
    """Suppliers sorted by name."""
    try:
        return get_supplier_service().get_all()

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=SupplierResponse, status_code=201)
async def create_supplier(data: SupplierSave):
    try:
        return get_supplier_service().create(data.name)

    except Exception as e:
        return handle_error(e)


@router.patch("/{supplier_id}", response_model=SupplierResponse)
async def rename_supplier(supplier_id: str, data: SupplierSave):
    """
    Raises:
        404: Supplier not found
    """
    try:
        return get_supplier_service().rename(supplier_id, data.name)

    except Exception as e:
        return handle_error(e)


@router.post("/delete")
async def delete_suppliers(data: SupplierDeleteRequest):
    """Bulk delete suppliers by id."""
    try:
        deleted = get_supplier_service().delete_many(data.ids)
        return {"deleted": deleted}

    except Exception as e:
        return handle_error(e)
