# backend/app/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Receive database sessions as parameters (not via Depends)
- Are easily testable via dependency injection

Usage:
    from app.services import BulkImportService, ModuleImportService
    from app.services import ExportProjector, write_csv, write_xlsx
    from app.services import (
        ImportFileError,
        ProjectNotFoundError,
        RowRejectedError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # File layouts, limits, rate limits
    ├── protocols.py                 # Collaborator interfaces (Protocol classes)
    ├── account_provisioning.py      # Access accounts for new interns
    ├── authorization_scope.py       # Project participation lookups
    ├── identity_resolution.py       # Business key -> entity upserts
    ├── tabular/                     # Upload decoding
    │   ├── base.py                  # Abstract decoder interface
    │   ├── csv_decoder.py           # CSV implementation
    │   └── excel_decoder.py         # XLSX implementation (openpyxl)
    ├── reconciliation/              # Phased imports
    │   ├── result.py                # ImportResult accumulator
    │   ├── values.py                # Date and status parsing
    │   ├── base.py                  # Shared phase/row loop
    │   ├── bulk_import.py           # Interns -> teams -> projects
    │   └── module_import.py         # Modules -> functions
    └── export/                      # Exports in the import layouts
        ├── projector.py             # Entity graph -> flat rows
        └── writers.py               # CSV and XLSX serializers
"""

from app.services.account_provisioning import AccountProvisioningService
from app.services.authorization_scope import AuthorizationScopeService
# Exceptions
from app.services.exceptions import (
    # Base exceptions
    ServiceError,
    NotFoundError,
    ProjectNotFoundError,
    # File-level
    ImportFileError,
    UnsupportedFileTypeError,
    EmptyUploadError,
    TabularDecodeError,
    # Row-level
    ReconciliationError,
    RowRejectedError,
    DuplicateKeyError,
    DateParseError,
    UnknownStatusError,
)
from app.services.export import ExportProjector, write_csv, write_xlsx
from app.services.identity_resolution import IdentityResolutionService
from app.services.reconciliation import BulkImportService, ImportResult, ModuleImportService

__all__ = [
    # ==========================================================================
    # Services
    # ==========================================================================
    "AccountProvisioningService",
    "AuthorizationScopeService",
    "IdentityResolutionService",
    "BulkImportService",
    "ModuleImportService",
    "ImportResult",
    # Export
    "ExportProjector",
    "write_csv",
    "write_xlsx",

    # ==========================================================================
    # Exceptions
    # ==========================================================================
    "ServiceError",
    "NotFoundError",
    "ProjectNotFoundError",
    "ImportFileError",
    "UnsupportedFileTypeError",
    "EmptyUploadError",
    "TabularDecodeError",
    "ReconciliationError",
    "RowRejectedError",
    "DuplicateKeyError",
    "DateParseError",
    "UnknownStatusError",
]
