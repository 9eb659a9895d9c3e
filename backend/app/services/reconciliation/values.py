# backend/app/services/reconciliation/values.py
"""
Cell value parsing shared by the reconcilers.

Dates:
    Tried in order: DD/MM/YYYY, DD-MM-YYYY, YYYY-MM-DD, MM/DD/YYYY,
    MM-DD-YYYY, DD.MM.YYYY, YYYY.MM.DD, then an Excel serial day number.
    Day-first wins for ambiguous values ("03/04/2024" is 3 April).

Statuses:
    Matched case-insensitively against the enum member names, with spaces
    and hyphens read as underscores ("in progress" -> IN_PROGRESS).
    Unknown values are either rejected (strict) or logged and ignored.
"""

import enum
import logging
from datetime import date, datetime, timedelta
from typing import TypeVar

from app.services.exceptions import DateParseError, UnknownStatusError

logger = logging.getLogger(__name__)

StatusT = TypeVar("StatusT", bound=enum.Enum)


# =============================================================================
# DATES
# =============================================================================

DATE_FORMATS: list[tuple[str, str]] = [
    ("%d/%m/%Y", "DD/MM/YYYY"),
    ("%d-%m-%Y", "DD-MM-YYYY"),
    ("%Y-%m-%d", "YYYY-MM-DD"),
    ("%m/%d/%Y", "MM/DD/YYYY"),
    ("%m-%d-%Y", "MM-DD-YYYY"),
    ("%d.%m.%Y", "DD.MM.YYYY"),
    ("%Y.%m.%d", "YYYY.MM.DD"),
]

# Day zero of the spreadsheet serial date system (accounts for the 1900 leap bug)
EXCEL_EPOCH = date(1899, 12, 30)


def parse_date(value: str | None) -> date | None:
    """
    Parse a date cell.

    Args:
        value: Raw cell text

    Returns:
        Parsed date, or None for a blank cell

    Raises:
        DateParseError: If no format matches
    """
    if value is None or not value.strip():
        return None

    text = value.strip()

    for pattern, _ in DATE_FORMATS:
        try:
            return datetime.strptime(text, pattern).date()
        except ValueError:
            continue

    try:
        serial = float(text)
    except ValueError:
        serial = None

    if serial is not None and serial.is_integer() and serial > 0:
        try:
            return EXCEL_EPOCH + timedelta(days=int(serial))
        except OverflowError:
            pass

    raise DateParseError(text, [label for _, label in DATE_FORMATS])


# =============================================================================
# STATUSES
# =============================================================================

def parse_status(
        value: str | None,
        status_enum: type[StatusT],
        *,
        strict: bool = False,
) -> StatusT | None:
    """
    Parse a status cell into a member of ``status_enum``.

    Args:
        value: Raw cell text
        status_enum: Target enum class (e.g. ProjectStatus)
        strict: Raise instead of ignoring unknown values

    Returns:
        Enum member, or None when blank or unknown (lenient mode). None lets
        the resolver apply the default on create and keep the stored value
        on update.

    Raises:
        UnknownStatusError: Unknown value in strict mode
    """
    if value is None or not value.strip():
        return None

    normalized = value.strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return status_enum[normalized]
    except KeyError:
        pass

    allowed = [member.name for member in status_enum]
    if strict:
        raise UnknownStatusError(value.strip(), allowed)

    logger.warning(
        f"Unknown {status_enum.__name__} value '{value.strip()}', "
        f"ignoring (allowed: {', '.join(allowed)})"
    )
    return None


# =============================================================================
# DECLARATIONS
# =============================================================================

def optional(value: str) -> str | None:
    """Blank cell -> None, anything else unchanged."""
    return value if value else None
