"""
Draft order API routes.

The draft (cart) lives in the server's ephemeral cache, one slot per
browsing context. Clients name their context with the X-Client-Id header;
without it everyone shares the "default" slot.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Header
from fastapi.responses import Response, StreamingResponse
import structlog

from models.draft import DraftItemSave, DraftOrderItem, DraftResponse
from models.history import HistorySessionView
from routes.errors import handle_error
from services.draft_service import get_draft_store
from services.export_service import get_export_service
from services.order_archive_service import get_order_archiver
from services.product_service import get_product_service

logger = structlog.get_logger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("", response_model=DraftResponse)
async def get_draft(x_client_id: Optional[str] = Header(None)):
    """Current draft mapping (product_id -> line)."""
    try:
        items = get_draft_store(x_client_id).load()
        return DraftResponse(items=items, count=len(items))

    except Exception as e:
        return handle_error(e)


@router.put("/{product_id}", response_model=DraftOrderItem)
async def save_draft_item(
    product_id: str,
    data: DraftItemSave,
    x_client_id: Optional[str] = Header(None),
):
    """
    Create or overwrite the draft line for a product.

    Resubmitting replaces the line (new id, new values); quantities are not
    added together.

    Raises:
        404: Product not found
        422: Quantity not > 0 or unit not case/piece
    """
    try:
        get_product_service().get_by_id(product_id)
        store = get_draft_store(x_client_id)
        return store.upsert(product_id, data.quantity, data.stock, data.unit)

    except Exception as e:
        return handle_error(e)


@router.delete("/{product_id}", status_code=204)
async def remove_draft_item(product_id: str, x_client_id: Optional[str] = Header(None)):
    """
    Remove the draft line for a product.

    Raises:
        404: No line for this product
    """
    try:
        get_draft_store(x_client_id).remove(product_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)


@router.post("/archive", response_model=HistorySessionView, status_code=201)
async def archive_draft(x_client_id: Optional[str] = Header(None)):
    """
    Write the draft to order history and clear it.

    The draft is kept if either write fails. A failure after the session
    row was created leaves that session empty (details.orphaned_session).

    Raises:
        422: Draft is empty
        500: Remote write failed
    """
    try:
        store = get_draft_store(x_client_id)
        catalog = get_product_service().get_all()
        return get_order_archiver().archive_store(store, catalog)

    except Exception as e:
        return handle_error(e)


@router.get("/export")
async def export_draft(x_client_id: Optional[str] = Header(None)):
    """Download the current draft as an Excel file."""
    try:
        drafts = get_draft_store(x_client_id).load()
        catalog = get_product_service().get_all()
        output = get_export_service().generate_draft_excel(drafts, catalog)

        filename = f"Current_Order_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.xlsx"
        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    except Exception as e:
        return handle_error(e)
