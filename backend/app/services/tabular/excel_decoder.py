# backend/app/services/tabular/excel_decoder.py
"""
Spreadsheet (.xlsx) decoder.

Reads the first worksheet of a workbook with openpyxl and turns each row
into string fields, reading the first N columns positionally.

Cell Coercion:
    text              -> as-is
    date / datetime   -> ISO calendar date ("2024-01-31")
    boolean           -> "true" / "false"
    integral number   -> integer text ("1234", not "1234.0")
    other number      -> decimal text
    empty             -> ""

Formula cells yield their cached result (the workbook is opened with
data_only=True), which is what a user sees in the sheet.
"""

import io
import logging
import zlib
from datetime import date, datetime, time
from typing import Any, BinaryIO
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.services.exceptions import TabularDecodeError
from app.services.tabular.base import TabularDecoder, TabularRow, is_blank_row

logger = logging.getLogger(__name__)


class ExcelTableDecoder(TabularDecoder):
    """
    Decoder for Office Open XML workbooks.

    Example:
        decoder = ExcelTableDecoder()

        with open("interns.xlsx", "rb") as f:
            rows = decoder.decode(f, "interns.xlsx", width=14)
    """

    @property
    def name(self) -> str:
        return "Excel"

    @property
    def supported_extensions(self) -> set[str]:
        return {".xlsx"}

    @property
    def supported_content_types(self) -> set[str]:
        return {"application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"}

    def decode(self, file: BinaryIO, filename: str, width: int) -> list[TabularRow]:
        """
        Decode the first worksheet into data rows.

        Every returned row has exactly ``width`` fields.
        """
        raw_content = file.read()

        try:
            workbook = load_workbook(io.BytesIO(raw_content), read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, SyntaxError, zlib.error, KeyError, OSError,
                ValueError) as e:
            raise TabularDecodeError(filename, str(e) or e.__class__.__name__) from e

        try:
            if not workbook.worksheets:
                raise TabularDecodeError(filename, "workbook contains no worksheets")

            sheet = workbook.worksheets[0]
            rows: list[TabularRow] = []

            for line_number, cells in enumerate(
                    sheet.iter_rows(min_row=1, max_col=width, values_only=True),
                    start=1,
            ):
                if line_number == 1:
                    continue  # header

                values = [self._cell_to_string(value) for value in cells[:width]]
                values.extend([""] * (width - len(values)))

                if is_blank_row(values):
                    continue

                rows.append(TabularRow(line_number=line_number, values=values))
        # Read-only workbooks parse sheet XML lazily, so damage inside a sheet
        # surfaces here. XML parse errors (stdlib and lxml) derive from SyntaxError.
        except (SyntaxError, BadZipFile, zlib.error, KeyError, OSError, ValueError) as e:
            raise TabularDecodeError(filename, str(e) or e.__class__.__name__) from e
        finally:
            workbook.close()

        logger.debug(f"Decoded {len(rows)} data rows from sheet '{sheet.title}' of {filename}")
        return rows

    @staticmethod
    def _cell_to_string(value: Any) -> str:
        """Coerce a cell value to the string handed to the reconcilers."""
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        # bool before int: bool is a subclass of int
        if isinstance(value, bool):
            return "true" if value else "false"
        # datetime before date: datetime is a subclass of date
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, time):
            return value.isoformat()
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
