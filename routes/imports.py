"""
Catalog import API routes.

Multipart upload of a product-name spreadsheet plus an optional ZIP of
images named after the products.
"""

from fastapi import APIRouter, File, Form, UploadFile
from typing import Optional
import structlog

from models.catalog_import import ImportPreview, ImportResult
from routes.errors import handle_error
from services.catalog_import_service import get_catalog_import_service

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _read_optional(upload: Optional[UploadFile]) -> Optional[bytes]:
    if upload is None:
        return None
    return await upload.read()


@router.post("/preview", response_model=ImportPreview)
async def preview_import(
    company_name: str = Form(..., description="Company the products belong to"),
    spreadsheet: UploadFile = File(..., description="Spreadsheet with a 'Product Name' column"),
    images: Optional[UploadFile] = File(None, description="ZIP of product images"),
):
    """
    Parse and match an upload without writing anything.

    Raises:
        422: Missing company, unreadable file, no 'Product Name' column
    """
    logger.info(
        "import_preview_requested",
        company_name=company_name,
        filename=spreadsheet.filename,
        has_images=images is not None,
    )

    try:
        content = await spreadsheet.read()
        archive = await _read_optional(images)

        service = get_catalog_import_service()
        return service.preview(company_name, content, spreadsheet.filename, archive)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ImportResult, status_code=201)
async def run_import(
    company_name: str = Form(..., description="Company the products belong to"),
    spreadsheet: UploadFile = File(..., description="Spreadsheet with a 'Product Name' column"),
    images: Optional[UploadFile] = File(None, description="ZIP of product images"),
    confirm_unmatched: bool = Form(
        False,
        description="Import even though images were uploaded and none matched"
    ),
):
    """
    Import products and tag them with the next batch code.

    Chunks are written one at a time; if one fails the earlier chunks stay
    in the catalog and the error details report completed/total.

    Raises:
        409: Images uploaded, none matched, confirm_unmatched not set
        422: Validation or parse error (nothing written)
        500: A chunk failed to write
    """
    logger.info(
        "import_requested",
        company_name=company_name,
        filename=spreadsheet.filename,
        has_images=images is not None,
        confirm_unmatched=confirm_unmatched,
    )

    try:
        content = await spreadsheet.read()
        archive = await _read_optional(images)

        service = get_catalog_import_service()
        return service.run_import(
            company_name,
            content,
            spreadsheet.filename,
            archive,
            confirm=lambda preview: confirm_unmatched,
        )

    except Exception as e:
        return handle_error(e)
