# backend/app/routers/bulk_import.py
"""
Bulk intern/team/project import and export endpoints.

Key features:
- CSV and Excel (.xlsx) uploads via the tabular decoder registry
- Three-tier reconciliation (interns -> teams -> projects)
- Row-level failures reported as line-numbered diagnostics, never as 5xx
- Exports in the import layout, so a download can be re-uploaded unchanged
"""

import io
import logging
from datetime import date

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_bulk_import_service, get_export_projector
from app.middleware.rate_limit import limiter
from app.schemas.imports import ImportResultResponse, SupportedFormatsResponse
from app.services.constants import (
    BULK_EXPORT_SHEET_TITLE,
    BULK_IMPORT_COLUMNS,
    CSV_MEDIA_TYPE,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_EXPORT,
    RATE_LIMIT_UPLOAD,
    XLSX_MEDIA_TYPE,
)
from app.services.exceptions import ImportFileError
from app.services.export import ExportProjector, write_csv, write_xlsx
from app.services.reconciliation import BulkImportService, ImportResult, file_error_result
from app.services.tabular import get_supported_content_types, get_supported_extensions
from app.utils.files import attachment_response, read_upload

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/bulk-import",
    tags=["Bulk Import"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def to_response(result: ImportResult) -> ImportResultResponse:
    """Convert a service result into the API response model."""
    return ImportResultResponse(
        success_count=result.success_count,
        failed_count=result.failed_count,
        total_count=result.total_count,
        errors=result.errors,
    )


def rejected_upload(error: ImportFileError) -> JSONResponse:
    """400 response carrying the same result shape as a processed upload."""
    response = to_response(file_error_result(error))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=response.model_dump(),
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/formats",
    response_model=SupportedFormatsResponse,
    summary="List supported file formats",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_supported_formats(request: Request) -> SupportedFormatsResponse:
    """
    Get the accepted file kinds and the expected column order.
    """
    return SupportedFormatsResponse(
        extensions=get_supported_extensions(),
        content_types=get_supported_content_types(),
        columns=BULK_IMPORT_COLUMNS,
    )


@router.post(
    "/upload",
    response_model=ImportResultResponse,
    summary="Import interns, teams and projects from a file",
    responses={
        200: {"description": "File processed (check counts and errors)"},
        400: {"description": "Empty upload or unsupported file type", "model": ImportResultResponse},
        413: {"description": "File too large"},
    },
)
@limiter.limit(RATE_LIMIT_UPLOAD)
def upload_bulk_data(
        request: Request,  # Required for rate limiting
        file: UploadFile = File(
            ...,
            description="CSV or Excel (.xlsx) file with the 14-column layout"
        ),
        db: Session = Depends(get_db),
        service: BulkImportService = Depends(get_bulk_import_service),
) -> ImportResultResponse | JSONResponse:
    """
    Import interns, teams and projects.

    **Columns (positional, header row is skipped):**
    ```
    intern_code,name,email,institute,training_start_date,training_end_date,
    team_name,team_leader_intern_code,project_name,project_description,
    project_manager_id,project_status,project_start_date,project_target_date
    ```

    **Behavior:**
    - Entities are matched by intern code, team name and project name.
      Existing entities only receive the non-empty values of a row.
    - Teams may be referenced before the row that declares their leader.
    - Each failing row becomes a `line <n>: <message>` entry; the other rows
      are still imported.
    """
    logger.info(f"Bulk import request: {file.filename}")

    try:
        content = read_upload(file)
    except ImportFileError as e:
        logger.warning(f"Bulk import rejected: {e.message}")
        return rejected_upload(e)

    result = service.import_file(
        db=db,
        file=io.BytesIO(content),
        filename=file.filename or "unknown",
        content_type=file.content_type,
    )

    if result.failed_count:
        logger.warning(
            f"Bulk import finished with {result.failed_count} failures "
            f"({result.success_count} rows imported)"
        )
    else:
        logger.info(f"Bulk import successful: {result.success_count} rows imported")

    return to_response(result)


@router.get(
    "/export",
    summary="Export all interns, teams and projects as CSV",
    response_class=Response,
)
@limiter.limit(RATE_LIMIT_EXPORT)
def export_bulk_csv(
        request: Request,
        db: Session = Depends(get_db),
        projector: ExportProjector = Depends(get_export_projector),
) -> Response:
    """
    Download every intern with their teams and projects in the import layout.

    An intern on two teams that each work on two projects appears on four
    rows; interns without teams and teams without projects get one row with
    the remaining columns blank.
    """
    rows = projector.bulk_rows(db)
    payload = write_csv(BULK_IMPORT_COLUMNS, rows, settings.export_date_format)
    filename = f"intern-data-export-{date.today().isoformat()}.csv"
    return attachment_response(payload, filename, CSV_MEDIA_TYPE)


@router.get(
    "/export/excel",
    summary="Export all interns, teams and projects as Excel",
    response_class=Response,
)
@limiter.limit(RATE_LIMIT_EXPORT)
def export_bulk_excel(
        request: Request,
        db: Session = Depends(get_db),
        projector: ExportProjector = Depends(get_export_projector),
) -> Response:
    """
    Same rows as the CSV export, as a workbook with native date cells.
    """
    rows = projector.bulk_rows(db)
    payload = write_xlsx(BULK_IMPORT_COLUMNS, rows, BULK_EXPORT_SHEET_TITLE)
    filename = f"intern-data-export-{date.today().isoformat()}.xlsx"
    return attachment_response(payload, filename, XLSX_MEDIA_TYPE)
