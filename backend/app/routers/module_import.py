# backend/app/routers/module_import.py
"""
Module and function import/export endpoints, scoped to one project.

Owners and developers must belong to a team assigned to the project;
anyone else is reported per row and skipped.
"""

import io
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, Path, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import get_export_projector, get_module_import_service
from app.middleware.rate_limit import limiter
from app.models import Project
from app.routers.bulk_import import rejected_upload, to_response
from app.schemas.imports import ImportResultResponse
from app.services.constants import (
    CSV_MEDIA_TYPE,
    MODULE_EXPORT_SHEET_TITLE,
    MODULE_IMPORT_COLUMNS,
    MODULE_TEMPLATE_ROWS,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_EXPORT,
    RATE_LIMIT_UPLOAD,
    XLSX_MEDIA_TYPE,
)
from app.services.exceptions import ImportFileError, ProjectNotFoundError
from app.services.export import ExportProjector, write_csv, write_xlsx
from app.services.reconciliation import ModuleImportService
from app.utils.files import attachment_response, read_upload

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/modules",
    tags=["Modules"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_project_or_404(db: Session, project_id: int) -> Project:
    """
    Load the project or raise ProjectNotFoundError (mapped to 404 globally).
    """
    project = db.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


def export_filename(project_id: int, extension: str) -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"modules_functions_project_{project_id}_{timestamp}{extension}"


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/import/{project_id}",
    response_model=ImportResultResponse,
    summary="Import modules and functions into a project",
    responses={
        200: {"description": "File processed (check counts and errors)"},
        400: {"description": "Empty upload or unsupported file type", "model": ImportResultResponse},
        413: {"description": "File too large"},
    },
)
@limiter.limit(RATE_LIMIT_UPLOAD)
def import_modules(
        request: Request,  # Required for rate limiting
        project_id: int = Path(..., gt=0, description="Target project"),
        file: UploadFile = File(
            ...,
            description="CSV or Excel (.xlsx) file with the 8-column layout"
        ),
        db: Session = Depends(get_db),
        service: ModuleImportService = Depends(get_module_import_service),
) -> ImportResultResponse | JSONResponse:
    """
    Import modules and their functions.

    **Columns (positional, header row is skipped):**
    ```
    module_name,module_description,module_owner_intern_code,module_status,
    function_name,function_description,function_developer_intern_code,function_status
    ```

    A module spread over several rows takes the last non-empty owner,
    description and status. An unknown project is reported as
    `line 0: Project not found with ID: <id>`.
    """
    logger.info(f"Module import request: {file.filename} -> project {project_id}")

    try:
        content = read_upload(file)
    except ImportFileError as e:
        logger.warning(f"Module import rejected: {e.message}")
        return rejected_upload(e)

    result = service.import_file(
        db=db,
        file=io.BytesIO(content),
        filename=file.filename or "unknown",
        project_id=project_id,
        content_type=file.content_type,
    )

    logger.info(
        f"Module import into project {project_id} finished: "
        f"{result.success_count} succeeded, {result.failed_count} failed"
    )
    return to_response(result)


@router.get(
    "/export/csv/{project_id}",
    summary="Export a project's modules and functions as CSV",
    response_class=Response,
)
@limiter.limit(RATE_LIMIT_EXPORT)
def export_modules_csv(
        request: Request,
        project_id: int = Path(..., gt=0),
        db: Session = Depends(get_db),
        projector: ExportProjector = Depends(get_export_projector),
) -> Response:
    """
    Download the project's modules and functions in the import layout.

    Raises **404** if the project does not exist.
    """
    project = get_project_or_404(db, project_id)
    rows = projector.module_rows(db, project)
    payload = write_csv(MODULE_IMPORT_COLUMNS, rows, settings.export_date_format)
    return attachment_response(payload, export_filename(project_id, ".csv"), CSV_MEDIA_TYPE)


@router.get(
    "/export/excel/{project_id}",
    summary="Export a project's modules and functions as Excel",
    response_class=Response,
)
@limiter.limit(RATE_LIMIT_EXPORT)
def export_modules_excel(
        request: Request,
        project_id: int = Path(..., gt=0),
        db: Session = Depends(get_db),
        projector: ExportProjector = Depends(get_export_projector),
) -> Response:
    """
    Same rows as the CSV export, as a workbook.

    Raises **404** if the project does not exist.
    """
    project = get_project_or_404(db, project_id)
    rows = projector.module_rows(db, project)
    payload = write_xlsx(MODULE_IMPORT_COLUMNS, rows, MODULE_EXPORT_SHEET_TITLE)
    return attachment_response(payload, export_filename(project_id, ".xlsx"), XLSX_MEDIA_TYPE)


@router.get(
    "/template/csv",
    summary="Download a sample module import file",
    response_class=Response,
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def download_module_template(request: Request) -> Response:
    """
    A ready-to-edit CSV with the expected header and a few sample rows.
    """
    payload = write_csv(MODULE_IMPORT_COLUMNS, MODULE_TEMPLATE_ROWS, settings.export_date_format)
    return attachment_response(payload, "module_template.csv", CSV_MEDIA_TYPE)
