"""
Product service for catalog reads and admin deletion.

Products are only created by the batch importer (catalog_import_service).
"""

from typing import Callable, Optional
import structlog

from config import get_supabase_client, settings
from models.product import ProductDeleteResponse, ProductResponse
from exceptions import ProductNotFoundError, DatabaseError, RemoteWriteError
from services.draft_cache import DraftCache
from services.draft_service import purge_products_from_drafts

logger = structlog.get_logger(__name__)

BATCH_CODE_WIDTH = 4
FIRST_BATCH_CODE = "0000"
PAGE_SIZE = 1000

ProgressCallback = Callable[[int, int], None]


def next_batch_code(last_code: Optional[str]) -> str:
    """
    Numeric successor of a batch code, zero-padded.

    '0000' -> '0001', '0041' -> '0042', None -> '0001'
    """
    try:
        current = int(last_code) if last_code else 0
    except ValueError:
        current = 0
    return str(current + 1).zfill(BATCH_CODE_WIDTH)


class ProductService:
    """
    Catalog business logic.

    Handles listing, lookup, batch code discovery and deletion.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self, search: Optional[str] = None) -> list[ProductResponse]:
        """
        Get the full catalog, newest first.

        Args:
            search: Case-insensitive substring matched against name,
                company name and batch code

        Returns:
            List of products
        """
        logger.info("getting_products", search=search)

        try:
            rows = self._fetch_all_rows()
        except Exception as e:
            logger.error("get_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

        products = [ProductResponse(**row) for row in rows]

        if search:
            needle = search.strip().lower()
            products = [
                p for p in products
                if needle in p.name.lower()
                or needle in p.company_name.lower()
                or needle in p.batch_code
            ]

        logger.info("products_retrieved", count=len(products))
        return products

    def get_catalog_map(self) -> dict[str, ProductResponse]:
        """Full catalog keyed by product id."""
        return {p.id: p for p in self.get_all()}

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductResponse(**result.data[0])

    def get_last_batch_code(self) -> str:
        """
        Highest batch code present in the catalog.

        Codes are zero-padded so string order equals numeric order.
        Returns '0000' for an empty catalog or when the lookup fails.
        """
        try:
            result = (
                self.db.table(self.table)
                .select("batch_code")
                .order("batch_code", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_last_batch_code_failed", error=str(e))
            return FIRST_BATCH_CODE

        if not result.data or not result.data[0].get("batch_code"):
            return FIRST_BATCH_CODE

        return result.data[0]["batch_code"]

    def get_next_batch_code(self) -> str:
        """Batch code the next import will use."""
        return next_batch_code(self.get_last_batch_code())

    # ===================
    # WRITE OPERATIONS
    # ===================

    def delete_products(
        self,
        ids: list[str],
        on_progress: Optional[ProgressCallback] = None,
        cache: Optional[DraftCache] = None,
    ) -> ProductDeleteResponse:
        """
        Delete products in chunks and drop them from every draft.

        Draft lines are purged after each committed chunk, so a later
        failure still leaves no draft line pointing at a deleted product.

        Args:
            ids: Product UUIDs
            on_progress: Called with (completed, total) after each chunk
            cache: Draft cache to purge (defaults to the process cache)

        Raises:
            RemoteWriteError: If a chunk fails; earlier chunks stay deleted
        """
        chunk_size = settings.product_delete_chunk_size
        total = len(ids)
        deleted = 0
        removed = 0

        logger.info("deleting_products", count=total, chunk_size=chunk_size)

        for start in range(0, total, chunk_size):
            chunk = ids[start:start + chunk_size]
            try:
                result = (
                    self.db.table(self.table)
                    .delete()
                    .in_("id", chunk)
                    .execute()
                )
            except Exception as e:
                logger.error(
                    "delete_products_chunk_failed",
                    start=start,
                    completed=start,
                    total=total,
                    draft_lines_removed=removed,
                    error=str(e)
                )
                raise RemoteWriteError(
                    "delete",
                    str(e),
                    details={
                        "completed": start,
                        "total": total,
                        "draft_lines_removed": removed,
                    }
                )

            deleted += len(result.data or [])
            removed += purge_products_from_drafts(chunk, cache)
            if on_progress:
                on_progress(min(start + chunk_size, total), total)

        logger.info(
            "products_deleted",
            requested=total,
            deleted=deleted,
            draft_lines_removed=removed,
        )
        return ProductDeleteResponse(deleted=deleted, draft_lines_removed=removed)

    # ===================
    # UTILITY METHODS
    # ===================

    def _fetch_all_rows(self) -> list[dict]:
        """Page through the table; PostgREST caps a single response."""
        rows: list[dict] = []
        offset = 0
        while True:
            result = (
                self.db.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .range(offset, offset + PAGE_SIZE - 1)
                .execute()
            )
            page = result.data or []
            rows.extend(page)
            if len(page) < PAGE_SIZE:
                return rows
            offset += PAGE_SIZE


# Singleton instance for convenience
_product_service: Optional[ProductService] = None


def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
