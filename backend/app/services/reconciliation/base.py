# backend/app/services/reconciliation/base.py
"""
Shared machinery for phased, multi-pass imports.

A batch is decoded once into rows, then handed to an ordered list of
phases. Each phase scans every row before the next one starts and the
session is committed between phases, so a later phase always sees every
entity an earlier phase created ("dependency tiers").

Inside a phase each unit of work (usually one row) runs in its own
SAVEPOINT. A failure rolls back only that unit and becomes a line-numbered
diagnostic; the loop carries on with the next row.

Error reporting:
    RowRejectedError  -> message used verbatim
    other ServiceError -> "<phase prefix><message>"
    SQLAlchemyError    -> "<phase prefix><driver message>"
    anything else      -> "<phase prefix><error>"
"""

import logging
from abc import ABC
from collections.abc import Callable
from typing import BinaryIO

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.services.constants import UNSUPPORTED_FILE_MESSAGE
from app.services.exceptions import (
    ImportFileError,
    RowRejectedError,
    ServiceError,
    TabularDecodeError,
    UnsupportedFileTypeError,
)
from app.services.identity_resolution import IdentityResolutionService
from app.services.reconciliation.result import ImportResult
from app.services.tabular import TabularRow, get_decoder
from app.utils.context import import_source

logger = logging.getLogger(__name__)

# A phase receives the session, every decoded row and the shared result
Phase = Callable[[Session, list[TabularRow], ImportResult], None]


def _database_message(error: SQLAlchemyError) -> str:
    """Driver-level message without SQLAlchemy's statement dump."""
    original = getattr(error, "orig", None)
    return str(original) if original is not None else str(error)


def file_error_result(error: ImportFileError) -> ImportResult:
    """Map a file-level problem to the single line 0 diagnostic reported for it."""
    if isinstance(error, UnsupportedFileTypeError):
        return ImportResult.fatal(UNSUPPORTED_FILE_MESSAGE)
    if isinstance(error, TabularDecodeError):
        return ImportResult.fatal(f"File processing error: {error.message}")
    return ImportResult.fatal(error.message)


class PhasedReconciler(ABC):
    """
    Base class for the import services.

    Subclasses declare the row ``width`` they read and build their phases;
    this class owns decoding, the per-row savepoint loop and error
    accumulation.
    """

    width: int = 0

    def __init__(
            self,
            resolver: IdentityResolutionService | None = None,
            strict_status: bool | None = None,
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            resolver: Identity resolver. Defaults to IdentityResolutionService.
            strict_status: Reject unknown status values instead of falling
                           back to defaults. Defaults to the
                           STRICT_STATUS_VALUES setting.
        """
        self._resolver = resolver or IdentityResolutionService()
        self._strict_status = (
            settings.strict_status_values if strict_status is None else strict_status
        )

    # =========================================================================
    # BATCH DRIVER
    # =========================================================================

    def _execute(
            self,
            db: Session,
            file: BinaryIO,
            filename: str,
            content_type: str | None,
            phases: list[Phase],
    ) -> ImportResult:
        """
        Decode the file and run every phase in order.

        File-level problems abort the batch with a single line 0 diagnostic.
        """
        with import_source(filename):
            return self._run_phases(db, file, filename, content_type, phases)

    def _run_phases(
            self,
            db: Session,
            file: BinaryIO,
            filename: str,
            content_type: str | None,
            phases: list[Phase],
    ) -> ImportResult:
        try:
            rows = self._decode(file, filename, content_type)
        except ImportFileError as e:
            logger.warning(f"Import of {filename} aborted: {e.message}")
            return file_error_result(e)
        except Exception as e:
            logger.error(f"Decoding {filename} failed: {e}", exc_info=True)
            return ImportResult.fatal(f"File processing error: {e}")

        result = ImportResult()
        if not rows:
            logger.info(f"{filename} contains no data rows")
            return result

        try:
            for phase in phases:
                phase(db, rows, result)
                db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Import of {filename} failed while committing: {e}", exc_info=True)
            result.add_error(0, f"File processing error: {_database_message(e)}")
            return result

        logger.info(
            f"Import of {filename} finished: {result.success_count} succeeded, "
            f"{result.failed_count} failed, {len(result.errors)} diagnostics"
        )
        return result

    def _decode(
            self,
            file: BinaryIO,
            filename: str,
            content_type: str | None,
    ) -> list[TabularRow]:
        decoder = get_decoder(filename, content_type)
        rows = decoder.decode(file, filename, self.width)
        logger.info(f"Decoded {len(rows)} rows from {filename} using {decoder.name} decoder")
        return rows

    # =========================================================================
    # ROW LOOP
    # =========================================================================

    def _run_unit(
            self,
            db: Session,
            line_number: int,
            result: ImportResult,
            error_prefix: str,
            action: Callable[[], None],
    ) -> bool:
        """
        Run one unit of work inside a SAVEPOINT.

        Args:
            db: Database session
            line_number: Source line used for diagnostics
            result: Accumulator receiving failures
            error_prefix: Phase prefix for unexpected errors
            action: The work to perform

        Returns:
            True if the action completed and its savepoint was released
        """
        try:
            with db.begin_nested():
                action()
        except RowRejectedError as e:
            logger.debug(f"Line {line_number} rejected: {e.message}")
            result.add_failure(line_number, e.message)
        except ServiceError as e:
            logger.warning(f"Line {line_number} failed: {e.message}")
            result.add_failure(line_number, f"{error_prefix}{e.message}")
        except SQLAlchemyError as e:
            logger.error(f"Line {line_number} failed with database error: {e}", exc_info=True)
            result.add_failure(line_number, f"{error_prefix}{_database_message(e)}")
        except Exception as e:
            logger.error(f"Line {line_number} failed unexpectedly: {e}", exc_info=True)
            result.add_failure(line_number, f"{error_prefix}{e}")
        else:
            return True
        return False

    @staticmethod
    def _require_width(row: TabularRow, width: int) -> None:
        if row.width < width:
            raise RowRejectedError(f"Invalid format: expected {width} columns")
