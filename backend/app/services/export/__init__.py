# backend/app/services/export/__init__.py
"""
Export of stored data in the import layouts.

Usage:
    from app.services.export import ExportProjector, write_csv, write_xlsx

    rows = ExportProjector().bulk_rows(db)
    payload = write_csv(BULK_IMPORT_COLUMNS, rows, settings.export_date_format)
"""

from app.services.export.projector import ExportProjector, ExportRow
from app.services.export.writers import write_csv, write_xlsx

__all__ = [
    "ExportProjector",
    "ExportRow",
    "write_csv",
    "write_xlsx",
]
