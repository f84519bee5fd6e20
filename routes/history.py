"""
Order history API routes.

Reads return sessions with line items repaired against the live catalog.
Edits write straight to the stored rows.
"""

from fastapi import APIRouter
from fastapi.responses import Response, StreamingResponse
import structlog

from models.history import (
    CatalogSelection,
    HistoryItemInput,
    HistoryItemsReplace,
    HistoryItemUpdate,
    HistorySessionView,
    SessionRename,
)
from routes.drafts import XLSX_MEDIA_TYPE
from routes.errors import handle_error
from services.export_service import export_filename, get_export_service
from services.history_service import get_history_editor, get_history_reader

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# SESSIONS
# ===================

@router.get("", response_model=list[HistorySessionView])
async def list_history():
    """All archived sessions, newest first."""
    try:
        return get_history_reader().get_history()

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=HistorySessionView)
async def get_session(session_id: str):
    """
    Raises:
        404: Session not found
    """
    try:
        return get_history_reader().get_session(session_id)

    except Exception as e:
        return handle_error(e)


@router.patch("/{session_id}")
async def rename_session(session_id: str, data: SessionRename):
    """Set a session's display name (blank clears it)."""
    try:
        return get_history_editor().rename_session(session_id, data.name)

    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str):
    """
    Delete a session and all its line items.

    Raises:
        404: Session not found
        500: A delete step failed (details.step)
    """
    try:
        get_history_editor().delete_session(session_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/export")
async def export_session(session_id: str):
    """Download a session as an Excel file."""
    try:
        session = get_history_reader().get_session(session_id)
        output = get_export_service().generate_session_excel(session)

        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers={
                "Content-Disposition": f'attachment; filename="{export_filename(session.timestamp)}"'
            },
        )

    except Exception as e:
        return handle_error(e)


# ===================
# LINE ITEMS
# ===================

@router.post("/{session_id}/items", status_code=201)
async def append_manual_item(session_id: str, data: HistoryItemInput):
    """
    Add a manually typed line to a session. product_id is ignored.

    Raises:
        404: Session not found
    """
    try:
        return get_history_editor().append_manual_item(session_id, data)

    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/catalog-selection", response_model=CatalogSelection)
async def begin_catalog_selection(session_id: str):
    """
    Start revising a session through the catalog.

    Returns the session's current lines keyed by product id. Commit the
    revised set with PUT /{session_id}/items.
    """
    try:
        return get_history_editor().begin_catalog_selection(session_id)

    except Exception as e:
        return handle_error(e)


@router.put("/{session_id}/items")
async def replace_items(session_id: str, data: HistoryItemsReplace):
    """
    Replace ALL line items of a session.

    Destructive: every existing item is deleted, then the given list is
    inserted. Items not included are lost permanently. An empty list
    empties the session.

    Raises:
        404: Session not found
        422: A replacement item is invalid (nothing deleted)
        500: Delete or insert failed (details.step)
    """
    try:
        count = get_history_editor().replace_items(session_id, data.items)
        return {"session_id": session_id, "count": count}

    except Exception as e:
        return handle_error(e)


@router.patch("/items/{item_id}")
async def update_item(item_id: str, data: HistoryItemUpdate):
    """
    Overwrite quantity and/or stock note of one line item.

    Raises:
        404: Item not found
        422: Nothing to update or quantity not > 0
    """
    try:
        return get_history_editor().update_item(item_id, data.quantity, data.stock)

    except Exception as e:
        return handle_error(e)


@router.delete("/items/{item_id}", status_code=204)
async def delete_item(item_id: str):
    """
    Delete one line item; its session is kept even if now empty.

    Raises:
        404: Item not found
    """
    try:
        get_history_editor().delete_item(item_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
