# backend/app/services/tabular/csv_decoder.py
"""
CSV decoder.

Splits delimited text into rows with quote-aware scanning:
- A quote character toggles "inside quotes" mode
- A comma or line break inside quotes is field content, not a separator
- A doubled quote inside quotes is one literal quote character

The last rule makes decoding the exact inverse of the exporter's escaping,
so a value such as ``Payments, Core`` or ``He said "hi"`` survives an
export/import round trip as a single field.

Encoding Handling:
    UTF-8 (with or without BOM), then Latin-1 as a last resort.
"""

import csv
import io
import logging
from typing import BinaryIO

from app.services.exceptions import TabularDecodeError
from app.services.tabular.base import TabularDecoder, TabularRow, is_blank_row

logger = logging.getLogger(__name__)


class CSVTableDecoder(TabularDecoder):
    """
    Decoder for comma-separated files.

    Example:
        decoder = CSVTableDecoder()

        with open("interns.csv", "rb") as f:
            rows = decoder.decode(f, "interns.csv", width=14)
    """

    @property
    def name(self) -> str:
        return "CSV"

    @property
    def supported_extensions(self) -> set[str]:
        return {".csv"}

    @property
    def supported_content_types(self) -> set[str]:
        return {"text/csv", "application/csv", "text/plain"}

    def decode(self, file: BinaryIO, filename: str, width: int) -> list[TabularRow]:
        """
        Decode CSV content into data rows.

        Rows longer than ``width`` are truncated to it; shorter rows are kept
        as they are so the caller can report them.
        """
        content = self._read_file_content(file)

        # newline="" keeps embedded line breaks inside quoted fields intact
        reader = csv.reader(io.StringIO(content, newline=""))

        rows: list[TabularRow] = []
        previous_line = 0
        header_seen = False

        try:
            for values in reader:
                start_line = previous_line + 1
                previous_line = reader.line_num

                if not header_seen:
                    header_seen = True
                    continue

                if is_blank_row(values):
                    continue

                rows.append(TabularRow(line_number=start_line, values=values[:width]))
        except csv.Error as e:
            raise TabularDecodeError(filename, f"line {reader.line_num}: {e}") from e

        logger.debug(f"Decoded {len(rows)} data rows from {filename}")
        return rows

    def _read_file_content(self, file: BinaryIO) -> str:
        """
        Read and decode file content, handling different encodings.

        Tries UTF-8 with BOM first (it also accepts plain UTF-8), falls back
        to Latin-1.
        """
        raw_content = file.read()
        if isinstance(raw_content, str):
            return raw_content

        try:
            return raw_content.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass

        # Fall back to Latin-1 (never fails, but may produce garbage)
        logger.warning("File is not UTF-8, falling back to Latin-1 encoding")
        return raw_content.decode("latin-1")
