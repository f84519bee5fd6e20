"""
Simple order API routes.

One open session at a time; lines are free text with no catalog link.
"""

from fastapi import APIRouter
from fastapi.responses import Response
import structlog

from models.simple_order import (
    SimpleOrderCreate,
    SimpleOrderResponse,
    SimpleOrderUpdate,
    SimpleSessionResponse,
)
from routes.errors import handle_error
from services.simple_order_service import get_simple_order_service

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# SESSIONS
# ===================

@router.get("/session", response_model=SimpleSessionResponse)
async def get_active_session():
    """Open session; one is created if none is open."""
    try:
        return get_simple_order_service().get_active_session()

    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/end", response_model=SimpleSessionResponse)
async def end_session(session_id: str):
    """
    Close a session and move it to history.

    Raises:
        404: Session not found
    """
    try:
        return get_simple_order_service().end_session(session_id)

    except Exception as e:
        return handle_error(e)


@router.get("/history", response_model=list[SimpleSessionResponse])
async def get_history():
    """Ended sessions, most recently ended first."""
    try:
        return get_simple_order_service().get_history()

    except Exception as e:
        return handle_error(e)


# ===================
# ORDER LINES
# ===================

@router.get("/sessions/{session_id}/orders", response_model=list[SimpleOrderResponse])
async def list_orders(session_id: str):
    """Lines of a session, by company then product name."""
    try:
        return get_simple_order_service().list_orders(session_id)

    except Exception as e:
        return handle_error(e)


@router.post(
    "/sessions/{session_id}/orders",
    response_model=SimpleOrderResponse,
    status_code=201,
)
async def add_order(session_id: str, data: SimpleOrderCreate):
    try:
        return get_simple_order_service().add_order(session_id, data)

    except Exception as e:
        return handle_error(e)


@router.patch("/orders/{order_id}", response_model=SimpleOrderResponse)
async def update_order(order_id: str, data: SimpleOrderUpdate):
    """
    Raises:
        404: Order line not found
        422: No fields given
    """
    try:
        return get_simple_order_service().update_order(order_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/orders/{order_id}", status_code=204)
async def delete_order(order_id: str):
    try:
        get_simple_order_service().delete_order(order_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
