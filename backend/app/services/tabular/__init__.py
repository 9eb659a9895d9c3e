# backend/app/services/tabular/__init__.py
"""
Tabular file decoders package.

This package contains decoders for the supported upload formats:
- CSV (.csv)
- Excel (.xlsx)

Usage:
    from app.services.tabular import get_decoder

    decoder = get_decoder("interns.xlsx", content_type)
    rows = decoder.decode(file, "interns.xlsx", width=14)

The factory function `get_decoder()` selects the decoder by file extension.
The upload's content type is only consulted when the filename carries no
extension at all, so "report.pdf" sent as text/csv is still rejected.
"""

import logging
from pathlib import Path

from app.services.exceptions import UnsupportedFileTypeError
from app.services.tabular.base import TabularDecoder, TabularRow, is_blank_row
from app.services.tabular.csv_decoder import CSVTableDecoder
from app.services.tabular.excel_decoder import ExcelTableDecoder

logger = logging.getLogger(__name__)

# =============================================================================
# DECODER REGISTRY
# =============================================================================

# All available decoders - add new decoders here
_DECODERS: list[TabularDecoder] = [
    CSVTableDecoder(),
    ExcelTableDecoder(),
]


# =============================================================================
# FACTORY FUNCTION
# =============================================================================

def get_decoder(
        filename: str,
        content_type: str | None = None
) -> TabularDecoder:
    """
    Get the appropriate decoder for a file.

    Args:
        filename: Name of the uploaded file
        content_type: Optional MIME type from upload

    Returns:
        Decoder instance that can handle this file type

    Raises:
        UnsupportedFileTypeError: If no decoder supports this file type
    """
    extension = Path(filename).suffix.lower()

    logger.debug(
        f"Finding decoder for: {filename} "
        f"(extension={extension}, content_type={content_type})"
    )

    for decoder in _DECODERS:
        if extension in decoder.supported_extensions:
            logger.debug(f"Selected decoder: {decoder.name}")
            return decoder

    # Extension unknown (or missing): try the declared content type
    if not extension and content_type:
        for decoder in _DECODERS:
            if content_type.lower() in decoder.supported_content_types:
                logger.debug(f"Selected decoder by content type: {decoder.name}")
                return decoder

    raise UnsupportedFileTypeError(
        filename=filename,
        extension=extension or "(none)",
        supported=get_supported_extensions(),
    )


def get_supported_extensions() -> list[str]:
    """Sorted list of all supported file extensions (e.g. [".csv", ".xlsx"])."""
    extensions = set()
    for decoder in _DECODERS:
        extensions.update(decoder.supported_extensions)
    return sorted(extensions)


def get_supported_content_types() -> list[str]:
    """Sorted list of all supported MIME types."""
    content_types = set()
    for decoder in _DECODERS:
        content_types.update(decoder.supported_content_types)
    return sorted(content_types)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Factory
    "get_decoder",
    "get_supported_extensions",
    "get_supported_content_types",
    # Base classes
    "TabularDecoder",
    "TabularRow",
    "is_blank_row",
    # Concrete decoders
    "CSVTableDecoder",
    "ExcelTableDecoder",
]
