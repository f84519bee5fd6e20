"""
Export service - Generate order Excel files.

Writes a history session, or the current draft, as an "Order Details"
sheet: one row per line item, sorted by company then product name.
"""

from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Optional
import re

from openpyxl import Workbook
from openpyxl.styles import Border, Font, Side
import structlog

from models.draft import DraftOrderItem
from models.history import HistorySessionView
from models.product import ProductResponse

logger = structlog.get_logger(__name__)

SHEET_TITLE = "Order Details"
HEADERS = ["No.", "Product Name", "Company", "Quantity", "Stock Info"]
COLUMN_WIDTHS = {"A": 6, "B": 40, "C": 28, "D": 14, "E": 30}


@dataclass
class ExportRow:
    """One order line as it appears in the sheet."""
    product_name: Optional[str]
    company_name: Optional[str]
    quantity: float
    unit: str
    stock: str = ""


def sort_export_rows(rows: Iterable[ExportRow]) -> list[ExportRow]:
    """Company name, then product name. Missing values sort as ''."""
    return sorted(
        rows,
        key=lambda r: (r.company_name or "", r.product_name or ""),
    )


def format_quantity(quantity: float, unit: str) -> str:
    """
    "<qty> <unit>".

    2.0 -> "2 case", 2.5 -> "2.5 piece"
    """
    if float(quantity).is_integer():
        qty = str(int(quantity))
    else:
        qty = str(quantity)
    return f"{qty} {unit}"


def export_filename(timestamp: str) -> str:
    """Order_History_<timestamp>.xlsx with ':' and '/' replaced."""
    safe = re.sub(r"[:/]", "-", timestamp or "").replace(" ", "_")
    return f"Order_History_{safe}.xlsx"


class ExportService:
    """Service for generating order export files."""

    def generate_session_excel(self, session: HistorySessionView) -> BytesIO:
        """
        Generate the Excel file for one history session.

        Args:
            session: Session with repaired items

        Returns:
            BytesIO containing the Excel file
        """
        rows = [
            ExportRow(
                product_name=item.product_name,
                company_name=item.company_name,
                quantity=item.quantity,
                unit=item.unit.value,
                stock=item.stock,
            )
            for item in session.items
        ]

        logger.info("generating_session_export", session_id=session.id, rows=len(rows))
        return self._write_workbook(rows)

    def generate_draft_excel(
        self,
        drafts: dict[str, DraftOrderItem],
        products: Iterable[ProductResponse],
    ) -> BytesIO:
        """
        Generate the Excel file for the current draft.

        Names and companies come from the catalog; lines whose product is
        gone keep empty name and company.
        """
        catalog = {p.id: p for p in products}
        rows = []
        for item in drafts.values():
            product = catalog.get(item.product_id)
            rows.append(ExportRow(
                product_name=product.name if product else None,
                company_name=product.company_name if product else None,
                quantity=item.quantity,
                unit=item.unit.value,
                stock=item.stock,
            ))

        logger.info("generating_draft_export", rows=len(rows))
        return self._write_workbook(rows)

    def _write_workbook(self, rows: list[ExportRow]) -> BytesIO:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        bold_font = Font(bold=True)
        thin_border = Border(bottom=Side(style="thin", color="000000"))

        for column, width in COLUMN_WIDTHS.items():
            ws.column_dimensions[column].width = width

        ws.append(HEADERS)
        for cell in ws[1]:
            cell.font = bold_font
            cell.border = thin_border

        for index, row in enumerate(sort_export_rows(rows), start=1):
            ws.append([
                index,
                row.product_name or "",
                row.company_name or "",
                format_quantity(row.quantity, row.unit),
                row.stock or "-",
            ])

        # Save to BytesIO
        output = BytesIO()
        wb.save(output)
        output.seek(0)

        return output


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
