# backend/tests/services/test_tabular_decoders.py
"""
Tests for the CSV and Excel decoders and the decoder registry.

This module tests:
- Decoder selection by extension and content type
- Quote-aware CSV splitting and source line numbers
- Spreadsheet cell coercion to strings
- Blank row skipping and width handling
- Unreadable files
"""

import io
from datetime import date, datetime

import pytest
from openpyxl import Workbook

from app.services.exceptions import TabularDecodeError, UnsupportedFileTypeError
from app.services.tabular import (
    CSVTableDecoder,
    ExcelTableDecoder,
    get_decoder,
    get_supported_content_types,
    get_supported_extensions,
)

from tests.conftest import truncate_sheet_xml


def _workbook_bytes(rows: list[list[object]]) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


# =============================================================================
# REGISTRY TESTS
# =============================================================================

class TestDecoderRegistry:
    """Tests for get_decoder() and the supported format listings."""

    def test_selects_csv_by_extension(self):
        assert isinstance(get_decoder("interns.csv"), CSVTableDecoder)

    def test_selects_excel_by_extension_case_insensitive(self):
        assert isinstance(get_decoder("INTERNS.XLSX"), ExcelTableDecoder)

    def test_rejects_unknown_extension_even_with_csv_content_type(self):
        """A known content type does not rescue a foreign extension."""
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            get_decoder("report.pdf", "text/csv")

        assert exc_info.value.extension == ".pdf"
        assert exc_info.value.supported == [".csv", ".xlsx"]

    def test_rejects_legacy_xls(self):
        with pytest.raises(UnsupportedFileTypeError):
            get_decoder("interns.xls")

    def test_falls_back_to_content_type_without_extension(self):
        decoder = get_decoder(
            "upload",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        assert isinstance(decoder, ExcelTableDecoder)

    def test_no_extension_and_no_content_type_is_rejected(self):
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            get_decoder("upload")

        assert exc_info.value.extension == "(none)"

    def test_supported_listings(self):
        assert get_supported_extensions() == [".csv", ".xlsx"]
        assert "text/csv" in get_supported_content_types()


# =============================================================================
# CSV DECODER TESTS
# =============================================================================

class TestCSVTableDecoder:
    """Tests for CSVTableDecoder.decode()."""

    @pytest.fixture
    def decoder(self) -> CSVTableDecoder:
        return CSVTableDecoder()

    def test_skips_header_and_numbers_lines_from_two(self, decoder):
        content = b"a,b,c\n1,2,3\n4,5,6\n"

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=3)

        assert [row.line_number for row in rows] == [2, 3]
        assert rows[0].values == ["1", "2", "3"]

    def test_quoted_comma_is_one_field(self, decoder):
        content = b'name,project\nAlice,"Payments, Core"\n'

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=2)

        assert rows[0].values == ["Alice", "Payments, Core"]

    def test_doubled_quote_is_literal_quote(self, decoder):
        content = b'name,note\nAlice,"He said ""hi"""\n'

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=2)

        assert rows[0].cell(1) == 'He said "hi"'

    def test_embedded_newline_keeps_start_line(self, decoder):
        """A record spanning two physical lines reports its first line."""
        content = b'a,b\n1,"multi\nline"\n2,x\n'

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=2)

        assert rows[0].line_number == 2
        assert rows[0].cell(1) == "multi\nline"
        assert rows[1].line_number == 4

    def test_blank_lines_skipped_but_counted(self, decoder):
        content = b"a,b\n1,2\n\n , \n3,4\n"

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=2)

        assert [row.line_number for row in rows] == [2, 5]

    def test_long_rows_truncated_short_rows_kept(self, decoder):
        content = b"a,b,c\n1,2,3,4,5\n1,2\n"

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=3)

        assert rows[0].values == ["1", "2", "3"]
        assert rows[1].width == 2

    def test_header_only_file_has_no_rows(self, decoder):
        rows = decoder.decode(io.BytesIO(b"a,b,c\n"), "t.csv", width=3)

        assert rows == []

    def test_utf8_bom_is_stripped(self, decoder):
        content = "\ufeffa,b\nJosé,x\n".encode("utf-8")

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=2)

        assert rows[0].cell(0) == "José"

    def test_latin1_fallback(self, decoder):
        content = "a,b\nJosé,x\n".encode("latin-1")

        rows = decoder.decode(io.BytesIO(content), "t.csv", width=2)

        assert rows[0].cell(0) == "José"

    def test_cell_trims_and_pads(self, decoder):
        rows = decoder.decode(io.BytesIO(b"a,b\n  P001  \n"), "t.csv", width=2)

        assert rows[0].cell(0) == "P001"
        assert rows[0].cell(5) == ""


# =============================================================================
# EXCEL DECODER TESTS
# =============================================================================

class TestExcelTableDecoder:
    """Tests for ExcelTableDecoder.decode()."""

    @pytest.fixture
    def decoder(self) -> ExcelTableDecoder:
        return ExcelTableDecoder()

    def test_coerces_cells_to_strings(self, decoder):
        content = _workbook_bytes([
            ["code", "count", "ratio", "flag", "start", "stamp", "empty"],
            [1234, 1234.0, 2.5, True, date(2024, 1, 31), datetime(2024, 2, 1, 9, 30), None],
        ])

        rows = decoder.decode(io.BytesIO(content), "t.xlsx", width=7)

        assert rows[0].values == ["1234", "1234", "2.5", "true", "2024-01-31", "2024-02-01", ""]

    def test_pads_rows_to_width(self, decoder):
        content = _workbook_bytes([["a", "b", "c"], ["only"]])

        rows = decoder.decode(io.BytesIO(content), "t.xlsx", width=3)

        assert rows[0].values == ["only", "", ""]

    def test_reads_only_declared_columns(self, decoder):
        content = _workbook_bytes([["a", "b"], ["1", "2", "ignored"]])

        rows = decoder.decode(io.BytesIO(content), "t.xlsx", width=2)

        assert rows[0].values == ["1", "2"]

    def test_blank_rows_skipped_line_numbers_kept(self, decoder):
        content = _workbook_bytes([["a"], ["first"], [None], ["third"]])

        rows = decoder.decode(io.BytesIO(content), "t.xlsx", width=1)

        assert [(row.line_number, row.cell(0)) for row in rows] == [(2, "first"), (4, "third")]

    def test_reads_first_sheet_only(self, decoder):
        wb = Workbook()
        wb.active.append(["a"])
        wb.active.append(["from first"])
        other = wb.create_sheet("Other")
        other.append(["a"])
        other.append(["from second"])
        buf = io.BytesIO()
        wb.save(buf)

        rows = decoder.decode(io.BytesIO(buf.getvalue()), "t.xlsx", width=1)

        assert [row.cell(0) for row in rows] == ["from first"]

    def test_corrupt_file_raises_decode_error(self, decoder):
        with pytest.raises(TabularDecodeError) as exc_info:
            decoder.decode(io.BytesIO(b"not a workbook"), "broken.xlsx", width=3)

        assert exc_info.value.filename == "broken.xlsx"
        assert str(exc_info.value).startswith("Could not read 'broken.xlsx'")

    def test_damaged_sheet_xml_raises_decode_error(self, decoder):
        content = truncate_sheet_xml(
            _workbook_bytes([["code", "name"]] + [[f"P{i:03d}", f"Intern {i}"] for i in range(20)])
        )

        with pytest.raises(TabularDecodeError) as exc_info:
            decoder.decode(io.BytesIO(content), "damaged.xlsx", width=2)

        assert exc_info.value.filename == "damaged.xlsx"
