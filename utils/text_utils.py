"""
Text utilities for spreadsheet cells, names and display timestamps.
"""

import math
from datetime import datetime
from typing import Any, Optional


def clean_cell_text(value: Any) -> Optional[str]:
    """
    Convert a spreadsheet cell to trimmed text.

    - None, NaN and blank strings → None
    - 12.0 → "12" (Excel stores bare numbers as floats)
    - "  Fish Ball  " → "Fish Ball"

    Args:
        value: Raw cell value from pandas

    Returns:
        Trimmed string or None
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return None if not value else str(value)

    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            value = int(value)

    text = str(value).strip()
    return text or None


def clean_name(name: Optional[str], max_length: int = 255) -> Optional[str]:
    """
    Clean a product/company name for storage.

    - Strips whitespace
    - Truncates to max length
    - Returns None for empty/whitespace-only strings
    """
    if not name:
        return None

    name = name.strip()

    if not name:
        return None

    if len(name) > max_length:
        name = name[:max_length]

    return name


def format_display_timestamp(value: Any) -> str:
    """
    Format a stored timestamp as "YYYY-MM-DD HH:MM:SS".

    Accepts datetime objects or ISO strings (with "Z" or offset).
    Unparseable input is returned as-is.
    """
    if value is None:
        return ""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return text

    return parsed.strftime("%Y-%m-%d %H:%M:%S")
