# backend/app/utils/__init__.py
"""
Utility modules for the Intern Data Reconciliation Service.

This package contains cross-cutting utilities used throughout the application:
- logging: Logging configuration with correlation ID and import source
- context: Request/batch context held in contextvars
- files: Upload checks and download responses

Usage:
    from app.utils import setup_logging
    from app.utils import get_correlation_id, set_correlation_id, import_source
"""

from app.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    get_import_source,
    import_source,
)
from app.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "get_import_source",
    "import_source",
]
