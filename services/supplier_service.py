"""
Supplier service for the supplier name list.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import DatabaseError, RemoteWriteError, SupplierNotFoundError, ValidationError
from models.supplier import SupplierResponse
from utils.text_utils import clean_name

logger = structlog.get_logger(__name__)


class SupplierService:
    """Supplier CRUD."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "suppliers"

    def get_all(self) -> list[SupplierResponse]:
        """Suppliers sorted by name."""
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .order("name")
                .execute()
            )
        except Exception as e:
            logger.error("get_suppliers_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [SupplierResponse(**row) for row in result.data or []]

    def create(self, name: str) -> SupplierResponse:
        supplier_name = self._require_name(name)

        try:
            result = self.db.table(self.table).insert({"name": supplier_name}).execute()
        except Exception as e:
            logger.error("create_supplier_failed", name=supplier_name, error=str(e))
            raise RemoteWriteError("insert", str(e))

        if not result.data:
            raise RemoteWriteError("insert", "Supplier insert returned no row")

        logger.info("supplier_created", name=supplier_name)
        return SupplierResponse(**result.data[0])

    def rename(self, supplier_id: str, name: str) -> SupplierResponse:
        """
        Raises:
            SupplierNotFoundError: If the supplier doesn't exist
        """
        supplier_name = self._require_name(name)

        try:
            result = (
                self.db.table(self.table)
                .update({"name": supplier_name})
                .eq("id", supplier_id)
                .execute()
            )
        except Exception as e:
            logger.error("rename_supplier_failed", supplier_id=supplier_id, error=str(e))
            raise RemoteWriteError("update", str(e))

        if not result.data:
            raise SupplierNotFoundError(supplier_id)

        logger.info("supplier_renamed", supplier_id=supplier_id, name=supplier_name)
        return SupplierResponse(**result.data[0])

    def delete_many(self, ids: list[str]) -> int:
        """Delete suppliers by id. Unknown ids are ignored. Returns rows deleted."""
        if not ids:
            return 0

        try:
            result = (
                self.db.table(self.table)
                .delete()
                .in_("id", ids)
                .execute()
            )
        except Exception as e:
            logger.error("delete_suppliers_failed", count=len(ids), error=str(e))
            raise RemoteWriteError("delete", str(e))

        deleted = len(result.data or [])
        logger.info("suppliers_deleted", requested=len(ids), deleted=deleted)
        return deleted

    @staticmethod
    def _require_name(name: str) -> str:
        supplier_name = clean_name(name, max_length=200)
        if not supplier_name:
            raise ValidationError(code="SUPPLIER_NAME_REQUIRED", message="Supplier name is required")
        return supplier_name


# Singleton instance
_service: Optional[SupplierService] = None


def get_supplier_service() -> SupplierService:
    """Get or create SupplierService instance."""
    global _service
    if _service is None:
        _service = SupplierService()
    return _service
