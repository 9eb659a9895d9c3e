# backend/app/services/reconciliation/__init__.py
"""
Phased import services.

- BulkImportService: interns -> teams -> projects (14 columns)
- ModuleImportService: modules -> functions of one project (8 columns)

Both return an ImportResult with counters and "line <n>: <message>"
diagnostics instead of raising on bad rows.
"""

from app.services.reconciliation.base import PhasedReconciler, file_error_result
from app.services.reconciliation.bulk_import import BulkImportService
from app.services.reconciliation.module_import import ModuleImportService
from app.services.reconciliation.result import ImportResult
from app.services.reconciliation.values import parse_date, parse_status

__all__ = [
    "PhasedReconciler",
    "file_error_result",
    "BulkImportService",
    "ModuleImportService",
    "ImportResult",
    "parse_date",
    "parse_status",
]
