"""
Product list parser for catalog imports.

Reads the first sheet of an uploaded spreadsheet and returns the values of its
"Product Name" column in row order.
"""

from io import BytesIO
from typing import Optional
import structlog

import pandas as pd

from exceptions import SpreadsheetParseError, MissingProductNameColumnError
from utils.text_utils import clean_cell_text

logger = structlog.get_logger(__name__)

PRODUCT_NAME_COLUMN = "product name"


def parse_product_names(content: bytes, filename: Optional[str] = None) -> list[str]:
    """
    Extract ordered product names from spreadsheet bytes.

    The header is matched case-insensitively after trimming, so
    "Product Name", "product name" and " PRODUCT NAME " all work.
    Blank cells are dropped; duplicates are kept.

    Args:
        content: Raw file bytes (.xlsx, or .csv when filename says so)
        filename: Original upload name, used only to detect CSV

    Returns:
        Product names in row order

    Raises:
        SpreadsheetParseError: If the file cannot be decoded
        MissingProductNameColumnError: If no matching column exists
    """
    logger.info("parsing_product_list", filename=filename, size=len(content or b""))

    df = _read_first_sheet(content, filename)

    column = _find_product_name_column(df.columns)
    if column is None:
        columns = [str(col) for col in df.columns]
        logger.warning("product_name_column_missing", columns=columns)
        raise MissingProductNameColumnError(columns)

    names = []
    for value in df[column].tolist():
        name = clean_cell_text(value)
        if name:
            names.append(name)

    logger.info("product_list_parsed", rows=len(df), names=len(names))
    return names


def _read_first_sheet(content: bytes, filename: Optional[str]) -> pd.DataFrame:
    """Load the first sheet as text cells, without NA coercion."""
    if not content:
        raise SpreadsheetParseError("Spreadsheet file is empty")

    is_csv = bool(filename) and filename.lower().endswith(".csv")

    try:
        if is_csv:
            return pd.read_csv(
                BytesIO(content),
                dtype=object,
                keep_default_na=False,
            )
        return pd.read_excel(
            BytesIO(content),
            sheet_name=0,
            engine="openpyxl",
            dtype=object,
            keep_default_na=False,
        )
    except Exception as e:
        logger.error("spreadsheet_read_failed", filename=filename, error=str(e))
        raise SpreadsheetParseError(
            message="Failed to read spreadsheet",
            details={"original_error": str(e)}
        )


def _find_product_name_column(columns) -> Optional[str]:
    """Return the first column whose header is "product name" in any case."""
    for col in columns:
        if str(col).strip().lower() == PRODUCT_NAME_COLUMN:
            return col
    return None
