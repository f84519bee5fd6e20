"""
Simple order service.

Free-text order sheet with no catalog link. At most one session is open
(ended_at is null) at a time; reading the active session creates one when
none is open. Ending a session stamps ended_at and moves it to history.
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import (
    DatabaseError,
    RemoteWriteError,
    SimpleOrderNotFoundError,
    SimpleSessionNotFoundError,
    ValidationError,
)
from models.draft import require_positive_quantity
from models.simple_order import (
    SimpleOrderCreate,
    SimpleOrderResponse,
    SimpleOrderUpdate,
    SimpleSessionResponse,
)
from utils.text_utils import clean_name

logger = structlog.get_logger(__name__)


class SimpleOrderService:
    """Simple order sessions and their lines."""

    def __init__(self):
        self.db = get_supabase_client()
        self.sessions_table = "simple_order_sessions"
        self.orders_table = "simple_orders"

    # ===================
    # SESSIONS
    # ===================

    def get_active_session(self) -> SimpleSessionResponse:
        """Open session, created if there is none."""
        try:
            result = (
                self.db.table(self.sessions_table)
                .select("*")
                .is_("ended_at", "null")
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_simple_session_failed", error=str(e))
            raise DatabaseError("select", str(e))

        if result.data:
            return SimpleSessionResponse(**result.data[0])

        try:
            created = (
                self.db.table(self.sessions_table)
                .insert({"created_at": datetime.now(timezone.utc).isoformat()})
                .execute()
            )
        except Exception as e:
            logger.error("create_simple_session_failed", error=str(e))
            raise RemoteWriteError("insert", str(e))

        if not created.data:
            raise RemoteWriteError("insert", "Session insert returned no row")

        session = SimpleSessionResponse(**created.data[0])
        logger.info("simple_session_created", session_id=session.id)
        return session

    def end_session(self, session_id: str) -> SimpleSessionResponse:
        """
        Stamp ended_at on a session.

        Raises:
            SimpleSessionNotFoundError: If the session doesn't exist
        """
        try:
            result = (
                self.db.table(self.sessions_table)
                .update({"ended_at": datetime.now(timezone.utc).isoformat()})
                .eq("id", session_id)
                .execute()
            )
        except Exception as e:
            logger.error("end_simple_session_failed", session_id=session_id, error=str(e))
            raise RemoteWriteError("update", str(e))

        if not result.data:
            raise SimpleSessionNotFoundError(session_id)

        logger.info("simple_session_ended", session_id=session_id)
        return SimpleSessionResponse(**result.data[0])

    def get_history(self) -> list[SimpleSessionResponse]:
        """Ended sessions, most recently ended first."""
        try:
            result = (
                self.db.table(self.sessions_table)
                .select("*")
                .not_.is_("ended_at", "null")
                .order("ended_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_simple_history_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [SimpleSessionResponse(**row) for row in result.data or []]

    # ===================
    # ORDER LINES
    # ===================

    def list_orders(self, session_id: str) -> list[SimpleOrderResponse]:
        """Lines of a session, by company then product name."""
        try:
            result = (
                self.db.table(self.orders_table)
                .select("*")
                .eq("session_id", session_id)
                .order("company_name")
                .order("product_name")
                .execute()
            )
        except Exception as e:
            logger.error("get_simple_orders_failed", session_id=session_id, error=str(e))
            raise DatabaseError("select", str(e))

        return [SimpleOrderResponse(**row) for row in result.data or []]

    def add_order(self, session_id: str, order: SimpleOrderCreate) -> SimpleOrderResponse:
        product_name = clean_name(order.product_name)
        if not product_name:
            raise ValidationError(code="PRODUCT_NAME_REQUIRED", message="Product name is required")

        row = {
            "session_id": session_id,
            "product_name": product_name,
            "company_name": clean_name(order.company_name) or "",
            "quantity": require_positive_quantity(order.quantity),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            result = self.db.table(self.orders_table).insert(row).execute()
        except Exception as e:
            logger.error("add_simple_order_failed", session_id=session_id, error=str(e))
            raise RemoteWriteError("insert", str(e))

        if not result.data:
            raise RemoteWriteError(
                "insert",
                "Order insert returned no row",
                details={"session_id": session_id}
            )

        logger.info("simple_order_added", session_id=session_id, product_name=product_name)
        return SimpleOrderResponse(**result.data[0])

    def update_order(self, order_id: str, updates: SimpleOrderUpdate) -> SimpleOrderResponse:
        """
        Partial update of one line.

        Raises:
            ValidationError: If no field is given
            SimpleOrderNotFoundError: If the line doesn't exist
        """
        update_data = updates.model_dump(exclude_none=True)
        if not update_data:
            raise ValidationError(code="NOTHING_TO_UPDATE", message="No fields to update")

        if "quantity" in update_data:
            update_data["quantity"] = require_positive_quantity(update_data["quantity"])

        try:
            result = (
                self.db.table(self.orders_table)
                .update(update_data)
                .eq("id", order_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_simple_order_failed", order_id=order_id, error=str(e))
            raise RemoteWriteError("update", str(e))

        if not result.data:
            raise SimpleOrderNotFoundError(order_id)

        return SimpleOrderResponse(**result.data[0])

    def delete_order(self, order_id: str) -> None:
        try:
            result = (
                self.db.table(self.orders_table)
                .delete()
                .eq("id", order_id)
                .execute()
            )
        except Exception as e:
            logger.error("delete_simple_order_failed", order_id=order_id, error=str(e))
            raise RemoteWriteError("delete", str(e))

        if not result.data:
            raise SimpleOrderNotFoundError(order_id)

        logger.info("simple_order_deleted", order_id=order_id)


# Singleton instance
_service: Optional[SimpleOrderService] = None


def get_simple_order_service() -> SimpleOrderService:
    """Get or create SimpleOrderService instance."""
    global _service
    if _service is None:
        _service = SimpleOrderService()
    return _service
