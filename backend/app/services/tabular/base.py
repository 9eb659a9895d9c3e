# backend/app/services/tabular/base.py
"""
Abstract interface for tabular file decoders.

This module defines the contract that all decoders must follow. Every
decoder turns an uploaded file into the same shape: an ordered list of
TabularRow objects holding plain string fields. No business meaning is
attached at this stage.

Design Principles:
- Single Responsibility: Decoders only decode, they don't validate rows
- Positional: Fields are read by column position, never by header name
- Uniform output: CSV and spreadsheet files produce identical row shapes
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class TabularRow:
    """
    One data record from an uploaded file.

    Attributes:
        line_number: 1-based source line where the record starts
                     (the header is line 1, so the first data row is line 2)
        values: Raw field values in column order. May be shorter than the
                declared width for delimited text; the reconcilers reject
                such rows.
    """

    line_number: int
    values: list[str] = field(default_factory=list)

    @property
    def width(self) -> int:
        """Number of fields present in the row."""
        return len(self.values)

    def cell(self, index: int) -> str:
        """Return the trimmed value at ``index``, or "" when the row is shorter."""
        if index >= len(self.values):
            return ""
        value = self.values[index]
        return value.strip() if value else ""


def is_blank_row(values: list[str]) -> bool:
    """True if every field is empty or whitespace."""
    return all(not (value or "").strip() for value in values)


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class TabularDecoder(ABC):
    """
    Abstract base class for tabular file decoders.

    Each file format (CSV, Excel) implements this interface.
    The decoder is ONLY responsible for:
    - Reading the file format
    - Skipping the header row
    - Coercing every field to a string
    - Dropping rows whose fields are all blank

    It does NOT:
    - Check row widths (the reconcilers do this per phase)
    - Parse dates or statuses
    - Touch the database

    Example:
        decoder = CSVTableDecoder()
        rows = decoder.decode(file, "interns.csv", width=14)

        for row in rows:
            print(f"Line {row.line_number}: {row.cell(0)}")
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this decoder (used in logs)."""
        pass

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """File extensions this decoder handles, lowercase with leading dot."""
        pass

    @property
    @abstractmethod
    def supported_content_types(self) -> set[str]:
        """MIME types this decoder handles (fallback when the extension is unknown)."""
        pass

    @abstractmethod
    def decode(self, file: BinaryIO, filename: str, width: int) -> list[TabularRow]:
        """
        Decode file contents into data rows.

        Args:
            file: File-like object (binary mode) to read from
            filename: Original filename (for error messages)
            width: Declared number of columns for this import kind

        Returns:
            Data rows in file order, header excluded

        Raises:
            TabularDecodeError: If the file cannot be read at all
        """
        pass
