# backend/app/routers/__init__.py
"""
API routers for the Intern Data Reconciliation Service.

Each router handles a specific domain:
- bulk_import: Intern/team/project import, export and supported formats
- module_import: Module/function import, export and template per project
"""

from app.routers.bulk_import import router as bulk_import_router
from app.routers.module_import import router as module_import_router

__all__ = [
    "bulk_import_router",
    "module_import_router",
]
