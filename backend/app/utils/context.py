# backend/app/utils/context.py
"""
Request and batch context for log enrichment.

Two pieces of context are tracked with contextvars, so they follow the
request through sync and async code without being passed around:

- correlation ID: one per HTTP request, set by CorrelationIdMiddleware
- import source: the file currently being reconciled, set by the import
  services for the duration of a batch

Usage:
    from app.utils.context import get_correlation_id, import_source

    with import_source("interns.csv"):
        logger.info("...")   # log record carries import_source="interns.csv"
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_import_source_var: ContextVar[str | None] = ContextVar("import_source", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    """Correlation ID of the current request, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current request.

    This should be called by middleware at the start of each request.
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)


# =============================================================================
# IMPORT SOURCE
# =============================================================================

def get_import_source() -> str | None:
    """Name of the file being imported, or None outside an import batch."""
    return _import_source_var.get()


@contextmanager
def import_source(filename: str) -> Iterator[None]:
    """
    Tag every log record emitted inside the block with the import filename.

    The previous value is restored on exit, so nested use is safe.
    """
    token = _import_source_var.set(filename)
    try:
        yield
    finally:
        _import_source_var.reset(token)
