"""
Order history service.

HistoryRepairReader rebuilds archived sessions for display, filling in
missing snapshot fields from the live catalog (repair-on-read; nothing is
written back). HistoryEditor mutates archived rows directly.

None of the multi-step edits are transactional. A failure part way through
leaves the completed steps in place.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import (
    DatabaseError,
    HistoryItemNotFoundError,
    HistorySessionNotFoundError,
    InvalidUnitError,
    RemoteWriteError,
    ValidationError,
)
from models.draft import DraftOrderItem, OrderUnit, parse_unit, require_positive_quantity
from models.history import (
    CatalogSelection,
    HistoryItemInput,
    HistoryItemView,
    HistorySessionView,
)
from models.product import ProductResponse
from services.order_archive_service import UNKNOWN
from services.product_service import ProductService
from utils.text_utils import clean_name, format_display_timestamp

logger = structlog.get_logger(__name__)

SESSIONS_TABLE = "order_sessions"
ITEMS_TABLE = "order_items"


def _is_known(value: Optional[str]) -> bool:
    return bool(value) and value != UNKNOWN


def _stored_unit(row: dict) -> OrderUnit:
    try:
        return parse_unit(row.get("unit"))
    except InvalidUnitError:
        logger.warning("history_item_unit_unrecognised", item_id=row.get("id"), unit=row.get("unit"))
        return OrderUnit.CASE


def _stored_quantity(row: dict) -> float:
    try:
        return float(row.get("quantity") or 0)
    except (TypeError, ValueError):
        logger.warning(
            "history_item_quantity_unreadable",
            item_id=row.get("id"),
            quantity=row.get("quantity"),
        )
        return 0.0


def repair_line_item(row: dict, product: Optional[ProductResponse]) -> HistoryItemView:
    """
    Resolve display fields of one stored line item.

    - name/company: stored value unless missing or "Unknown"; then the live
      product's value; if the product is gone, whatever was stored
      (or "Unknown" when nothing was)
    - image: stored image, else the live product's image
    """
    stored_name = row.get("product_name")
    stored_company = row.get("company_name")

    if _is_known(stored_name):
        product_name = stored_name
    elif product is not None:
        product_name = product.name
    else:
        product_name = stored_name or UNKNOWN

    if _is_known(stored_company):
        company_name = stored_company
    elif product is not None:
        company_name = product.company_name
    else:
        company_name = stored_company or UNKNOWN

    image_url = row.get("image_url") or (product.image_url if product else None)

    return HistoryItemView(
        id=row["id"],
        session_id=row.get("session_id") or "",
        product_id=row.get("product_id"),
        product_name=product_name,
        company_name=company_name,
        image_url=image_url,
        stock=str(row.get("stock") or ""),
        quantity=_stored_quantity(row),
        unit=_stored_unit(row),
    )


class HistoryRepairReader:
    """
    Reads archived sessions newest first, repairing snapshots on the way.

    The catalog is fetched once per read. If that fetch fails the read
    carries on with stored values only.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.products = ProductService()

    def get_history(self) -> list[HistorySessionView]:
        """
        All sessions, newest first, each with repaired items.

        A session whose items cannot be read is left out of the list
        rather than failing the whole read.

        Raises:
            DatabaseError: If the sessions cannot be read
        """
        logger.info("getting_history")

        try:
            result = (
                self.db.table(SESSIONS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_history_failed", error=str(e))
            raise DatabaseError("select", str(e))

        catalog = self._catalog_snapshot()
        history = []
        skipped = 0
        for row in result.data or []:
            try:
                history.append(self._build_session(row, catalog))
            except DatabaseError:
                skipped += 1

        logger.info("history_retrieved", sessions=len(history), skipped=skipped)
        return history

    def get_session(self, session_id: str) -> HistorySessionView:
        """
        One session with repaired items.

        Raises:
            HistorySessionNotFoundError: If the session doesn't exist
        """
        row = _fetch_session_row(self.db, session_id)
        return self._build_session(row, self._catalog_snapshot())

    def _catalog_snapshot(self) -> dict[str, ProductResponse]:
        try:
            return self.products.get_catalog_map()
        except Exception as e:
            logger.warning("history_catalog_unavailable", error=str(e))
            return {}

    def _build_session(self, row: dict, catalog: dict[str, ProductResponse]) -> HistorySessionView:
        session_id = row["id"]
        try:
            items_result = (
                self.db.table(ITEMS_TABLE)
                .select("*")
                .eq("session_id", session_id)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            logger.error("get_session_items_failed", session_id=session_id, error=str(e))
            raise DatabaseError("select", str(e), details={"session_id": session_id})

        items = [
            repair_line_item(item, catalog.get(item.get("product_id")))
            for item in items_result.data or []
        ]

        return HistorySessionView(
            id=session_id,
            session_id=row.get("session_id"),
            name=row.get("name"),
            created_at=row.get("created_at"),
            timestamp=format_display_timestamp(row.get("created_at")),
            items=items,
        )


class HistoryEditor:
    """
    Edits archived sessions in place.

    Operations hit the stored rows directly; snapshot fields written here
    are taken from the caller as-is.
    """

    def __init__(self):
        self.db = get_supabase_client()

    # ===================
    # LINE ITEMS
    # ===================

    def update_item(
        self,
        item_id: str,
        quantity: Optional[float] = None,
        stock: Optional[str] = None,
    ) -> dict:
        """
        Overwrite quantity and/or stock note of one line item.

        Raises:
            ValidationError: Nothing to update, or quantity not > 0
            HistoryItemNotFoundError: If the item doesn't exist
        """
        update_data: dict = {}
        if quantity is not None:
            update_data["quantity"] = require_positive_quantity(quantity)
        if stock is not None:
            update_data["stock"] = stock

        if not update_data:
            raise ValidationError(
                code="NOTHING_TO_UPDATE",
                message="Provide quantity and/or stock"
            )

        logger.info("updating_history_item", item_id=item_id, fields=list(update_data))

        try:
            result = (
                self.db.table(ITEMS_TABLE)
                .update(update_data)
                .eq("id", item_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_history_item_failed", item_id=item_id, error=str(e))
            raise RemoteWriteError("update", str(e), details={"item_id": item_id})

        if not result.data:
            raise HistoryItemNotFoundError(item_id)

        return result.data[0]

    def delete_item(self, item_id: str) -> None:
        """
        Delete one line item. The session stays, even if now empty.

        Raises:
            HistoryItemNotFoundError: If the item doesn't exist
        """
        logger.info("deleting_history_item", item_id=item_id)

        try:
            result = (
                self.db.table(ITEMS_TABLE)
                .delete()
                .eq("id", item_id)
                .execute()
            )
        except Exception as e:
            logger.error("delete_history_item_failed", item_id=item_id, error=str(e))
            raise RemoteWriteError("delete", str(e), details={"item_id": item_id})

        if not result.data:
            raise HistoryItemNotFoundError(item_id)

    def append_manual_item(self, session_id: str, entry: HistoryItemInput) -> dict:
        """
        Add a manually typed line (no product reference) to a session.

        Raises:
            HistorySessionNotFoundError: If the session doesn't exist
        """
        row = self._item_row(session_id, entry, manual=True)
        _fetch_session_row(self.db, session_id)

        try:
            result = self.db.table(ITEMS_TABLE).insert(row).execute()
        except Exception as e:
            logger.error("append_history_item_failed", session_id=session_id, error=str(e))
            raise RemoteWriteError("insert", str(e), details={"session_id": session_id})

        logger.info(
            "history_item_appended",
            session_id=session_id,
            product_name=row["product_name"],
        )
        return result.data[0] if result.data else row

    def begin_catalog_selection(self, session_id: str) -> CatalogSelection:
        """
        Hand a session over to the catalog flow.

        Returns the session's current lines so the caller can preload its
        selection; the revised set is committed with replace_items().

        Raises:
            HistorySessionNotFoundError: If the session doesn't exist
        """
        _fetch_session_row(self.db, session_id)

        try:
            result = (
                self.db.table(ITEMS_TABLE)
                .select("*")
                .eq("session_id", session_id)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            logger.error("get_session_items_failed", session_id=session_id, error=str(e))
            raise DatabaseError("select", str(e), details={"session_id": session_id})

        selection = CatalogSelection(session_id=session_id)
        for row in result.data or []:
            product_id = row.get("product_id")
            if product_id:
                selection.items[product_id] = DraftOrderItem(
                    id=row["id"],
                    product_id=product_id,
                    stock=row.get("stock") or "",
                    quantity=float(row["quantity"]),
                    unit=parse_unit(row.get("unit")),
                )
            else:
                selection.manual_items.append(repair_line_item(row, None))

        logger.info(
            "catalog_selection_started",
            session_id=session_id,
            items=len(selection.items),
            manual_items=len(selection.manual_items),
        )
        return selection

    def replace_items(self, session_id: str, items: list[HistoryItemInput]) -> int:
        """
        Replace a session's whole item set.

        DESTRUCTIVE: existing items are deleted first, then `items` is
        inserted. This is not a diff. Any existing item missing from
        `items` is permanently lost; an empty list empties the session.

        Returns:
            Number of items inserted

        Raises:
            ValidationError: If any replacement item is invalid (nothing deleted)
            HistorySessionNotFoundError: If the session doesn't exist
            RemoteWriteError: If the delete or the insert fails
        """
        rows = [self._item_row(session_id, item) for item in items]
        _fetch_session_row(self.db, session_id)

        logger.info("replacing_session_items", session_id=session_id, new_count=len(rows))

        try:
            self.db.table(ITEMS_TABLE).delete().eq("session_id", session_id).execute()
        except Exception as e:
            logger.error("clear_session_items_failed", session_id=session_id, error=str(e))
            raise RemoteWriteError(
                "delete", str(e), details={"step": "delete_items", "session_id": session_id}
            )

        if rows:
            try:
                self.db.table(ITEMS_TABLE).insert(rows).execute()
            except Exception as e:
                logger.error(
                    "insert_replacement_items_failed",
                    session_id=session_id,
                    error=str(e),
                )
                raise RemoteWriteError(
                    "insert", str(e), details={"step": "insert_items", "session_id": session_id}
                )

        logger.info("session_items_replaced", session_id=session_id, count=len(rows))
        return len(rows)

    # ===================
    # SESSIONS
    # ===================

    def delete_session(self, session_id: str) -> None:
        """
        Delete a session: its items first, then the session row.

        Raises:
            HistorySessionNotFoundError: If the session doesn't exist
            RemoteWriteError: If either step fails (items already deleted stay deleted)
        """
        _fetch_session_row(self.db, session_id)

        logger.info("deleting_history_session", session_id=session_id)

        try:
            self.db.table(ITEMS_TABLE).delete().eq("session_id", session_id).execute()
        except Exception as e:
            logger.error("delete_session_items_failed", session_id=session_id, error=str(e))
            raise RemoteWriteError(
                "delete", str(e), details={"step": "delete_items", "session_id": session_id}
            )

        try:
            self.db.table(SESSIONS_TABLE).delete().eq("id", session_id).execute()
        except Exception as e:
            logger.error("delete_session_row_failed", session_id=session_id, error=str(e))
            raise RemoteWriteError(
                "delete", str(e), details={"step": "delete_session", "session_id": session_id}
            )

        logger.info("history_session_deleted", session_id=session_id)

    def rename_session(self, session_id: str, name: str) -> dict:
        """
        Set a session's display name. Blank clears it.

        Raises:
            HistorySessionNotFoundError: If the session doesn't exist
        """
        try:
            result = (
                self.db.table(SESSIONS_TABLE)
                .update({"name": clean_name(name)})
                .eq("id", session_id)
                .execute()
            )
        except Exception as e:
            logger.error("rename_session_failed", session_id=session_id, error=str(e))
            raise RemoteWriteError("update", str(e), details={"session_id": session_id})

        if not result.data:
            raise HistorySessionNotFoundError(session_id)

        logger.info("history_session_renamed", session_id=session_id)
        return result.data[0]

    @staticmethod
    def _item_row(session_id: str, entry: HistoryItemInput, manual: bool = False) -> dict:
        product_name = clean_name(entry.product_name)
        if not product_name:
            raise ValidationError(code="PRODUCT_NAME_REQUIRED", message="Product name is required")

        return {
            "session_id": session_id,
            "product_id": None if manual else entry.product_id,
            "product_name": product_name,
            "company_name": clean_name(entry.company_name) or "",
            "image_url": None if manual else entry.image_url,
            "stock": entry.stock or "",
            "quantity": require_positive_quantity(entry.quantity),
            "unit": parse_unit(entry.unit).value,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }


def _fetch_session_row(db, session_id: str) -> dict:
    """Session row or HistorySessionNotFoundError."""
    try:
        result = (
            db.table(SESSIONS_TABLE)
            .select("*")
            .eq("id", session_id)
            .execute()
        )
    except Exception as e:
        logger.error("get_session_failed", session_id=session_id, error=str(e))
        raise DatabaseError("select", str(e), details={"session_id": session_id})

    if not result.data:
        raise HistorySessionNotFoundError(session_id)
    return result.data[0]


# Singleton instances
_reader: Optional[HistoryRepairReader] = None
_editor: Optional[HistoryEditor] = None


def get_history_reader() -> HistoryRepairReader:
    """Get or create HistoryRepairReader instance."""
    global _reader
    if _reader is None:
        _reader = HistoryRepairReader()
    return _reader


def get_history_editor() -> HistoryEditor:
    """Get or create HistoryEditor instance."""
    global _editor
    if _editor is None:
        _editor = HistoryEditor()
    return _editor
