"""
Catalog product API routes.

Products are created only through /api/imports.
"""

from fastapi import APIRouter, Query
from typing import Optional
import structlog

from models.product import (
    BatchCodeResponse,
    ProductDeleteRequest,
    ProductDeleteResponse,
    ProductListResponse,
    ProductResponse,
)
from routes.errors import handle_error
from services.product_service import get_product_service

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# ROUTES
# ===================

@router.get("", response_model=ProductListResponse)
async def list_products(
    search: Optional[str] = Query(None, description="Filter by name, company or batch code"),
):
    """
    List the catalog, newest first.
    """
    try:
        service = get_product_service()
        products = service.get_all(search=search)
        return ProductListResponse(data=products, total=len(products))

    except Exception as e:
        return handle_error(e)


@router.get("/batch-code", response_model=BatchCodeResponse)
async def get_batch_code():
    """Last used batch code and the code the next import will get."""
    try:
        service = get_product_service()
        last_code = service.get_last_batch_code()
        return BatchCodeResponse(
            last_batch_code=last_code,
            next_batch_code=service.get_next_batch_code(),
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str):
    """
    Get a single product by ID.

    Raises:
        404: Product not found
    """
    try:
        service = get_product_service()
        return service.get_by_id(product_id)

    except Exception as e:
        return handle_error(e)


@router.delete("/{product_id}", response_model=ProductDeleteResponse)
async def delete_product(product_id: str):
    """
    Delete one product and drop it from every draft.

    History line items keep their snapshot.

    Raises:
        404: Product not found
    """
    try:
        service = get_product_service()
        service.get_by_id(product_id)
        return service.delete_products([product_id])

    except Exception as e:
        return handle_error(e)


@router.post("/delete", response_model=ProductDeleteResponse)
async def delete_products(data: ProductDeleteRequest):
    """
    Bulk delete products (chunks of 50) and drop them from every draft.

    Raises:
        500: A chunk failed; earlier chunks stay deleted and out of drafts
    """
    try:
        logger.info("bulk_product_delete_requested", count=len(data.ids))
        return get_product_service().delete_products(data.ids)

    except Exception as e:
        return handle_error(e)
