# backend/app/services/reconciliation/module_import.py
"""
Import of modules and functions for a single project.

Every row of the 8-column layout names a module of the target project and
one function inside it. Two tiers:

1. Modules   - gather each module's declarations from every row, check the
               owner may work on the project, then create or refresh it
2. Functions - per row, check the developer and create or refresh the
               function inside a module settled in tier 1

"May work on the project" means being a member of at least one team
assigned to it (see AuthorizationScopeService).

Usage:
    from app.services.reconciliation import ModuleImportService

    service = ModuleImportService()
    result = service.import_file(db, f, "modules.xlsx", project_id=3)
"""

import logging
from dataclasses import dataclass, field
from typing import BinaryIO

from sqlalchemy.orm import Session

from app.models import FunctionStatus, Module, ModuleStatus, Project
from app.services.authorization_scope import AuthorizationScopeService
from app.services.constants import (
    COL_FUNCTION_DESCRIPTION,
    COL_FUNCTION_DEVELOPER,
    COL_FUNCTION_NAME,
    COL_FUNCTION_STATUS,
    COL_MODULE_DESCRIPTION,
    COL_MODULE_NAME,
    COL_MODULE_OWNER,
    COL_MODULE_STATUS,
    MODULE_IMPORT_WIDTH,
)
from app.services.exceptions import ProjectNotFoundError, RowRejectedError
from app.services.identity_resolution import IdentityResolutionService
from app.services.protocols import AuthorizationScopeProtocol
from app.services.reconciliation.base import PhasedReconciler
from app.services.reconciliation.result import ImportResult
from app.services.reconciliation.values import optional, parse_status
from app.services.tabular import TabularRow

logger = logging.getLogger(__name__)

MODULE_ERROR_PREFIX = "Module processing error: "
FUNCTION_ERROR_PREFIX = "Function processing error: "


@dataclass
class ModuleDeclaration:
    """What the file says about one module, gathered across all rows."""

    module_name: str
    first_line: int
    owner_code: str | None = None
    description: str | None = None
    status: str | None = None


@dataclass
class ModuleBatch:
    """State shared by the two tiers of one import call."""

    project: Project
    participant_ids: set[int]
    modules: dict[str, Module] = field(default_factory=dict)


class ModuleImportService(PhasedReconciler):
    """
    Two-tier reconciler for the module/function layout.

    Example:
        service = ModuleImportService()
        result = service.import_file(db, upload.file, "modules.csv", project_id=1)
    """

    width = MODULE_IMPORT_WIDTH

    def __init__(
            self,
            resolver: IdentityResolutionService | None = None,
            scope: AuthorizationScopeProtocol | None = None,
            strict_status: bool | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            resolver: Identity resolver. Defaults to IdentityResolutionService.
            scope: Participation lookups. Defaults to AuthorizationScopeService.
            strict_status: See PhasedReconciler.
        """
        super().__init__(resolver=resolver, strict_status=strict_status)
        self._scope = scope or AuthorizationScopeService()

    def import_file(
            self,
            db: Session,
            file: BinaryIO,
            filename: str,
            project_id: int,
            content_type: str | None = None,
    ) -> ImportResult:
        """
        Import modules and functions into an existing project.

        Args:
            db: Database session (committed once per tier)
            file: Uploaded file (binary mode)
            filename: Original filename, used to pick the decoder
            project_id: Target project
            content_type: Optional MIME type of the upload

        Returns:
            ImportResult; an unknown project yields a single line 0 diagnostic
        """
        project = db.get(Project, project_id)
        if project is None:
            logger.warning(f"Module import aborted: project {project_id} does not exist")
            return ImportResult.fatal(ProjectNotFoundError(project_id).message)

        batch = ModuleBatch(
            project=project,
            participant_ids=self._scope.participant_ids(db, project),
        )
        logger.info(
            f"Starting module import of {filename} into project '{project.project_name}' "
            f"({len(batch.participant_ids)} participants)"
        )

        return self._execute(
            db,
            file,
            filename,
            content_type,
            phases=[
                lambda session, rows, result: self._import_modules(session, rows, result, batch),
                lambda session, rows, result: self._import_functions(session, rows, result, batch),
            ],
        )

    # =========================================================================
    # TIER 1: MODULES
    # =========================================================================

    def _import_modules(
            self,
            db: Session,
            rows: list[TabularRow],
            result: ImportResult,
            batch: ModuleBatch,
    ) -> None:
        declarations: dict[str, ModuleDeclaration] = {}

        for row in rows:
            if row.width < self.width:
                result.add_failure(row.line_number, f"Invalid format: expected {self.width} columns")
                continue
            module_name = row.cell(COL_MODULE_NAME)
            if not module_name:
                continue

            declaration = declarations.get(module_name)
            if declaration is None:
                declaration = ModuleDeclaration(module_name=module_name, first_line=row.line_number)
                declarations[module_name] = declaration

            declaration.owner_code = row.cell(COL_MODULE_OWNER) or declaration.owner_code
            declaration.description = row.cell(COL_MODULE_DESCRIPTION) or declaration.description
            declaration.status = row.cell(COL_MODULE_STATUS) or declaration.status

        for declaration in declarations.values():
            self._run_unit(
                db, declaration.first_line, result, MODULE_ERROR_PREFIX,
                lambda declaration=declaration: self._settle_module(db, declaration, batch),
            )

        logger.info(
            f"Module tier settled {len(batch.modules)} of {len(declarations)} modules"
        )

    def _settle_module(self, db: Session, declaration: ModuleDeclaration, batch: ModuleBatch) -> None:
        if not declaration.owner_code:
            raise RowRejectedError("Module owner intern code is required")

        owner = self._resolver.find_intern(db, declaration.owner_code)
        if owner is None:
            raise RowRejectedError(f"Module owner intern not found: {declaration.owner_code}")

        if owner.id not in batch.participant_ids:
            raise RowRejectedError(
                f"Module owner {declaration.owner_code} is not part of any team "
                "assigned to this project"
            )

        module, _ = self._resolver.resolve_module(
            db,
            batch.project,
            declaration.module_name,
            description=optional(declaration.description or ""),
            owner=owner,
            status=parse_status(declaration.status, ModuleStatus, strict=self._strict_status),
        )
        batch.modules[declaration.module_name] = module

    # =========================================================================
    # TIER 2: FUNCTIONS
    # =========================================================================

    def _import_functions(
            self,
            db: Session,
            rows: list[TabularRow],
            result: ImportResult,
            batch: ModuleBatch,
    ) -> None:
        for row in rows:
            if row.width < self.width:
                continue
            linked = self._run_unit(
                db, row.line_number, result, FUNCTION_ERROR_PREFIX,
                lambda row=row: self._upsert_function(db, row, batch),
            )
            if linked:
                result.record_success()

    def _upsert_function(self, db: Session, row: TabularRow, batch: ModuleBatch) -> None:
        module_name = row.cell(COL_MODULE_NAME)
        function_name = row.cell(COL_FUNCTION_NAME)
        if not module_name or not function_name:
            raise RowRejectedError("Module name and function name are required")

        module = batch.modules.get(module_name)
        if module is None:
            raise RowRejectedError(f"Module not found: {module_name}")

        developer_code = row.cell(COL_FUNCTION_DEVELOPER)
        if not developer_code:
            raise RowRejectedError("Function developer intern code is required")

        developer = self._resolver.find_intern(db, developer_code)
        if developer is None:
            raise RowRejectedError(f"Function developer intern not found: {developer_code}")

        if developer.id not in batch.participant_ids:
            raise RowRejectedError(
                f"Function developer {developer_code} is not part of any team "
                "assigned to this project"
            )

        self._resolver.resolve_function(
            db,
            module,
            function_name,
            description=optional(row.cell(COL_FUNCTION_DESCRIPTION)),
            developer=developer,
            status=parse_status(row.cell(COL_FUNCTION_STATUS), FunctionStatus, strict=self._strict_status),
        )
