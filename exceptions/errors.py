"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict,
and serializes to the standard error response via to_dict().
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource or pending decision (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class StoreConnectionError(ExternalServiceError):
    """Remote store unreachable."""

    def __init__(self, message: str):
        super().__init__(service="supabase", message=message)


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


class RemoteWriteError(DatabaseError):
    """
    A persistence call failed.

    Raised by multi-step writes (chunked import, archive, session delete).
    Steps committed before the failure are not rolled back; details say
    how far the operation got.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(operation, message, details)
        self.code = "REMOTE_WRITE_ERROR"


# ===================
# PARSE ERRORS
# ===================

class ParseError(ValidationError):
    """Uploaded file could not be read."""

    def __init__(
        self,
        message: str,
        code: str = "PARSE_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(message=message, code=code, details=details)


class SpreadsheetParseError(ParseError):
    """Product spreadsheet could not be decoded."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            code="SPREADSHEET_PARSE_ERROR",
            details=details
        )


class MissingProductNameColumnError(ParseError):
    """No "Product Name" column in the first sheet."""

    def __init__(self, columns: list[str]):
        super().__init__(
            message='Spreadsheet has no "Product Name" column',
            code="PRODUCT_NAME_COLUMN_MISSING",
            details={"columns": columns}
        )


class ImageArchiveParseError(ParseError):
    """Image ZIP archive could not be opened."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            code="IMAGE_ARCHIVE_PARSE_ERROR",
            details=details
        )


# ===================
# CATALOG ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class MissingCompanyNameError(ValidationError):
    """Import submitted without a company name."""

    def __init__(self):
        super().__init__(
            code="COMPANY_NAME_REQUIRED",
            message="Company name is required"
        )


class EmptyImportError(ValidationError):
    """Spreadsheet yielded no product names."""

    def __init__(self):
        super().__init__(
            code="IMPORT_EMPTY",
            message="No product names found in spreadsheet"
        )


class ImportConfirmationRequiredError(ConflictError):
    """Images were uploaded but none matched a product name."""

    def __init__(self, product_count: int, image_count: int):
        super().__init__(
            code="IMPORT_CONFIRMATION_REQUIRED",
            message="No images were matched to products. Confirm to upload anyway.",
            details={"product_count": product_count, "image_count": image_count}
        )


# ===================
# ORDER ERRORS
# ===================

class InvalidQuantityError(ValidationError):
    """Order quantity must be positive."""

    def __init__(self, quantity: Any):
        super().__init__(
            code="INVALID_QUANTITY",
            message="Quantity must be greater than zero",
            details={"provided": quantity}
        )


class InvalidUnitError(ValidationError):
    """Unit must be case or piece."""

    def __init__(self, unit: Any):
        super().__init__(
            code="INVALID_UNIT",
            message="Unit must be case or piece",
            details={"provided": unit, "valid": ["case", "piece"]}
        )


class EmptyDraftError(ValidationError):
    """Archive requested with no draft lines."""

    def __init__(self):
        super().__init__(
            code="DRAFT_EMPTY",
            message="No active orders to complete"
        )


class DraftItemNotFoundError(NotFoundError):
    """No draft line for this product."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Draft item",
            identifier=product_id,
            code="DRAFT_ITEM_NOT_FOUND"
        )


class HistorySessionNotFoundError(NotFoundError):
    """Archived session not found."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="History session",
            identifier=session_id,
            code="HISTORY_SESSION_NOT_FOUND"
        )


class HistoryItemNotFoundError(NotFoundError):
    """Archived line item not found."""

    def __init__(self, item_id: str):
        super().__init__(
            resource="History item",
            identifier=item_id,
            code="HISTORY_ITEM_NOT_FOUND"
        )


# ===================
# SUPPLIER ERRORS
# ===================

class SupplierNotFoundError(NotFoundError):
    """Supplier not found."""

    def __init__(self, supplier_id: str):
        super().__init__(
            resource="Supplier",
            identifier=supplier_id,
            code="SUPPLIER_NOT_FOUND"
        )


# ===================
# SIMPLE ORDER ERRORS
# ===================

class SimpleOrderNotFoundError(NotFoundError):
    """Simple order line not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Simple order",
            identifier=order_id,
            code="SIMPLE_ORDER_NOT_FOUND"
        )


class SimpleSessionNotFoundError(NotFoundError):
    """Simple order session not found."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Simple order session",
            identifier=session_id,
            code="SIMPLE_SESSION_NOT_FOUND"
        )
