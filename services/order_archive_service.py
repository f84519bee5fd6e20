"""
Order archive service.

Turns a completed draft into a history session plus denormalized line items.

Two sequential writes, no transaction:
    1. insert one order_sessions row
    2. insert every line item in one call
If step 2 fails the session row from step 1 stays behind, empty. That
orphan is logged and not cleaned up.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import uuid4
import structlog

from config import get_supabase_client
from exceptions import EmptyDraftError, RemoteWriteError
from models.draft import DraftOrderItem
from models.history import HistoryItemView, HistorySessionView
from models.product import ProductResponse
from services.draft_service import OrderDraftStore
from utils.text_utils import format_display_timestamp

logger = structlog.get_logger(__name__)

UNKNOWN = "Unknown"


class OrderArchiver:
    """
    Archive business logic.

    Snapshot fields (name, company, image) are copied from the catalog
    snapshot the caller supplies; they are never re-validated afterwards.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.sessions_table = "order_sessions"
        self.items_table = "order_items"

    def archive(
        self,
        drafts: dict[str, DraftOrderItem],
        catalog: Iterable[ProductResponse],
    ) -> HistorySessionView:
        """
        Write a draft mapping to history.

        Args:
            drafts: product_id -> DraftOrderItem
            catalog: Current catalog snapshot

        Returns:
            The new session with its items

        Raises:
            EmptyDraftError: If drafts is empty (nothing is written)
            RemoteWriteError: If either write fails
        """
        if not drafts:
            raise EmptyDraftError()

        products = {p.id: p for p in catalog}
        now = datetime.now(timezone.utc).isoformat()
        session_label = f"SESSION_{uuid4().hex}"

        logger.info("archiving_draft", item_count=len(drafts), session_label=session_label)

        # Step 1: session row
        try:
            result = (
                self.db.table(self.sessions_table)
                .insert({
                    "session_id": session_label,
                    "created_at": now,
                })
                .execute()
            )
        except Exception as e:
            logger.error("archive_session_insert_failed", error=str(e))
            raise RemoteWriteError("insert", str(e), details={"step": "create_session"})

        if not result.data:
            logger.error("archive_session_insert_empty")
            raise RemoteWriteError(
                "insert",
                "Session insert returned no row",
                details={"step": "create_session"}
            )

        session = result.data[0]
        session_id = session["id"]

        # Step 2: line items
        rows = [
            self._line_item_row(session_id, item, products.get(item.product_id), now)
            for item in drafts.values()
        ]

        try:
            items_result = self.db.table(self.items_table).insert(rows).execute()
        except Exception as e:
            logger.error(
                "archive_orphan_session",
                session_id=session_id,
                item_count=len(rows),
                error=str(e),
            )
            raise RemoteWriteError(
                "insert",
                str(e),
                details={
                    "step": "insert_items",
                    "session_id": session_id,
                    "orphaned_session": True,
                }
            )

        items = [
            HistoryItemView(
                id=row["id"],
                session_id=session_id,
                product_id=row.get("product_id"),
                product_name=row.get("product_name") or UNKNOWN,
                company_name=row.get("company_name") or UNKNOWN,
                image_url=row.get("image_url"),
                stock=row.get("stock") or "",
                quantity=row["quantity"],
                unit=row.get("unit") or "case",
            )
            for row in (items_result.data or [])
        ]

        logger.info("draft_archived", session_id=session_id, item_count=len(items))

        return HistorySessionView(
            id=session_id,
            session_id=session.get("session_id"),
            name=session.get("name"),
            created_at=session.get("created_at"),
            timestamp=format_display_timestamp(session.get("created_at")),
            items=items,
        )

    def archive_store(
        self,
        store: OrderDraftStore,
        catalog: Iterable[ProductResponse],
    ) -> HistorySessionView:
        """
        Archive a store's draft and clear the store.

        The store is cleared only after both writes succeed.
        """
        session = self.archive(store.load(), catalog)
        store.clear()
        return session

    @staticmethod
    def _line_item_row(
        session_id: str,
        item: DraftOrderItem,
        product: Optional[ProductResponse],
        now: str,
    ) -> dict:
        return {
            "session_id": session_id,
            "product_id": item.product_id,
            "product_name": product.name if product else UNKNOWN,
            "company_name": product.company_name if product else UNKNOWN,
            "image_url": product.image_url if product else None,
            "quantity": item.quantity,
            "unit": item.unit.value,
            "stock": item.stock,
            "created_at": now,
        }


# Singleton instance
_service: Optional[OrderArchiver] = None


def get_order_archiver() -> OrderArchiver:
    """Get or create OrderArchiver instance."""
    global _service
    if _service is None:
        _service = OrderArchiver()
    return _service
