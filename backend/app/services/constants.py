# backend/app/services/constants.py
"""
Centralized constants for the reconciliation services.

This module provides a single source of truth for the file layouts and
limits used across the application. Column order is part of the import
format contract: rows are read positionally, never by header name, so the
export header must match these lists exactly for a file to round-trip.

Usage:
    from app.services.constants import (
        BULK_IMPORT_COLUMNS,
        BULK_IMPORT_WIDTH,
        MAX_UPLOAD_FILE_SIZE_BYTES,
    )
"""


# =============================================================================
# BULK IMPORT LAYOUT (interns, teams, projects)
# =============================================================================

BULK_IMPORT_COLUMNS: list[str] = [
    "intern_code",
    "name",
    "email",
    "institute",
    "training_start_date",
    "training_end_date",
    "team_name",
    "team_leader_intern_code",
    "project_name",
    "project_description",
    "project_manager_id",
    "project_status",
    "project_start_date",
    "project_target_date",
]

BULK_IMPORT_WIDTH: int = len(BULK_IMPORT_COLUMNS)  # 14

# Column positions, named after the header they sit under
COL_INTERN_CODE = 0
COL_INTERN_NAME = 1
COL_INTERN_EMAIL = 2
COL_INTERN_INSTITUTE = 3
COL_TRAINING_START = 4
COL_TRAINING_END = 5
COL_TEAM_NAME = 6
COL_TEAM_LEADER = 7
COL_PROJECT_NAME = 8
COL_PROJECT_DESCRIPTION = 9
COL_PROJECT_MANAGER = 10
COL_PROJECT_STATUS = 11
COL_PROJECT_START = 12
COL_PROJECT_TARGET = 13


# =============================================================================
# MODULE IMPORT LAYOUT (modules, functions of one project)
# =============================================================================

MODULE_IMPORT_COLUMNS: list[str] = [
    "module_name",
    "module_description",
    "module_owner_intern_code",
    "module_status",
    "function_name",
    "function_description",
    "function_developer_intern_code",
    "function_status",
]

MODULE_IMPORT_WIDTH: int = len(MODULE_IMPORT_COLUMNS)  # 8

COL_MODULE_NAME = 0
COL_MODULE_DESCRIPTION = 1
COL_MODULE_OWNER = 2
COL_MODULE_STATUS = 3
COL_FUNCTION_NAME = 4
COL_FUNCTION_DESCRIPTION = 5
COL_FUNCTION_DEVELOPER = 6
COL_FUNCTION_STATUS = 7

# Sample rows served by the template endpoint
MODULE_TEMPLATE_ROWS: list[list[str]] = [
    ["Authentication", "Enables a user to log in to the system", "1234", "NOT_STARTED",
     "Admin Login", "Enables an admin to login via credentials", "1234", "PENDING"],
    ["Authentication", "Enables a user to log in to the system", "1234", "NOT_STARTED",
     "Intern Login via Google", "Enables an intern to login via Google OAuth", "1235", "IN_DEVELOPMENT"],
    ["Bulk Data IO", "Enables an admin to import data in bulks", "1236", "IN_PROGRESS",
     "Import Bulk Data", "Enables admin to import data of all Project Managers (and others)", "1236", "IN_DEVELOPMENT"],
    ["Bulk Data IO", "Enables an admin to import data in bulks", "1236", "IN_PROGRESS",
     "Export Data", "Enables admin to export data", "1236", "PENDING"],
]


# =============================================================================
# EXPORT SETTINGS
# =============================================================================

# Worksheet titles for spreadsheet exports
BULK_EXPORT_SHEET_TITLE: str = "Data"
MODULE_EXPORT_SHEET_TITLE: str = "Modules and Functions"

# Number format applied to native date cells in spreadsheet exports
EXPORT_EXCEL_DATE_FORMAT: str = "dd-mm-yyyy"

# Column width bounds (in characters) for spreadsheet exports
EXPORT_MIN_COLUMN_WIDTH: int = 12
EXPORT_MAX_COLUMN_WIDTH: int = 50

# Diagnostic returned for uploads that are neither CSV nor XLSX
UNSUPPORTED_FILE_MESSAGE: str = "Only CSV and Excel (.xlsx) files are supported"

CSV_MEDIA_TYPE: str = "text/csv"
XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Default rate limit for read endpoints (GET requests)
RATE_LIMIT_DEFAULT: str = "100/minute"

# Rate limit for export endpoints
# Exports walk the whole entity graph, moderate limit
RATE_LIMIT_EXPORT: str = "30/minute"

# Rate limit for file upload endpoints
# File processing is resource-intensive, limit to prevent DoS
RATE_LIMIT_UPLOAD: str = "5/minute"

# Rate limit for health check endpoints
# Higher limit for monitoring tools that poll frequently
RATE_LIMIT_HEALTH: str = "300/minute"


# =============================================================================
# RESOURCE LIMIT CONSTANTS
# =============================================================================

# Maximum file upload size in bytes (10 MB)
MAX_UPLOAD_FILE_SIZE_BYTES: int = 10 * 1024 * 1024  # 10 MB
