# backend/app/services/export/writers.py
"""
Serializers for projected export rows.

Both writers render the same header and the same field order; they only
differ in how values are represented:

    CSV   dates formatted with the configured display format, None -> ""
    XLSX  native date cells with a dd-mm-yyyy number format, None -> empty

CSV quoting is the csv module's QUOTE_MINIMAL: a field containing the
delimiter, a quote or a newline is wrapped in quotes with inner quotes
doubled, which is exactly what the CSV decoder undoes.
"""

import csv
import io
import logging
from collections.abc import Sequence
from datetime import date, datetime

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.services.constants import (
    EXPORT_EXCEL_DATE_FORMAT,
    EXPORT_MAX_COLUMN_WIDTH,
    EXPORT_MIN_COLUMN_WIDTH,
)
from app.services.export.projector import ExportRow

logger = logging.getLogger(__name__)

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="D9D9D9", end_color="D9D9D9", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


# =============================================================================
# CSV
# =============================================================================

def _csv_value(value, date_format: str) -> str:
    if value is None:
        return ""
    # datetime before date: datetime is a subclass of date
    if isinstance(value, datetime):
        return value.date().strftime(date_format)
    if isinstance(value, date):
        return value.strftime(date_format)
    return str(value)


def write_csv(header: Sequence[str], rows: list[ExportRow], date_format: str) -> str:
    """
    Render rows as CSV text.

    Args:
        header: Column names (the import layout)
        rows: Projected rows
        date_format: strftime pattern for date columns (e.g. "%d-%m-%Y")

    Returns:
        CSV document including the header line
    """
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(header)
    for row in rows:
        writer.writerow([_csv_value(value, date_format) for value in row])

    logger.debug(f"Wrote CSV export with {len(rows)} rows")
    return buf.getvalue()


# =============================================================================
# XLSX
# =============================================================================

def _apply_header_style(ws, col_count: int) -> None:
    """Bold grey header with thin borders on row 1."""
    for col in range(1, col_count + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _auto_width(ws) -> None:
    """Size columns to their content within the configured bounds."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is None:
                continue
            length = 10 if isinstance(cell.value, date) else len(str(cell.value))
            max_len = max(max_len, length)
        width = min(max(max_len + 2, EXPORT_MIN_COLUMN_WIDTH), EXPORT_MAX_COLUMN_WIDTH)
        ws.column_dimensions[col_letter].width = width


def write_xlsx(header: Sequence[str], rows: list[ExportRow], sheet_title: str) -> bytes:
    """
    Render rows as a single-sheet workbook.

    Args:
        header: Column names (the import layout)
        rows: Projected rows
        sheet_title: Worksheet title

    Returns:
        The .xlsx file contents
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title

    ws.append(list(header))
    _apply_header_style(ws, len(header))

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(row, start=1):
            if value is None:
                continue
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if isinstance(value, date):
                cell.number_format = EXPORT_EXCEL_DATE_FORMAT

    _auto_width(ws)

    buf = io.BytesIO()
    wb.save(buf)
    logger.debug(f"Wrote XLSX export '{sheet_title}' with {len(rows)} rows")
    return buf.getvalue()
