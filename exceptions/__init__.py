"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    StoreConnectionError,
    DatabaseError,
    RemoteWriteError,

    # Parsers
    ParseError,
    SpreadsheetParseError,
    MissingProductNameColumnError,
    ImageArchiveParseError,

    # Catalog
    ProductNotFoundError,
    MissingCompanyNameError,
    EmptyImportError,
    ImportConfirmationRequiredError,

    # Orders
    InvalidQuantityError,
    InvalidUnitError,
    EmptyDraftError,
    DraftItemNotFoundError,
    HistorySessionNotFoundError,
    HistoryItemNotFoundError,

    # Suppliers
    SupplierNotFoundError,

    # Simple orders
    SimpleOrderNotFoundError,
    SimpleSessionNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "StoreConnectionError",
    "DatabaseError",
    "RemoteWriteError",

    # Parsers
    "ParseError",
    "SpreadsheetParseError",
    "MissingProductNameColumnError",
    "ImageArchiveParseError",

    # Catalog
    "ProductNotFoundError",
    "MissingCompanyNameError",
    "EmptyImportError",
    "ImportConfirmationRequiredError",

    # Orders
    "InvalidQuantityError",
    "InvalidUnitError",
    "EmptyDraftError",
    "DraftItemNotFoundError",
    "HistorySessionNotFoundError",
    "HistoryItemNotFoundError",

    # Suppliers
    "SupplierNotFoundError",

    # Simple orders
    "SimpleOrderNotFoundError",
    "SimpleSessionNotFoundError",
]
