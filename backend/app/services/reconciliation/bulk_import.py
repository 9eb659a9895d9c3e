# backend/app/services/reconciliation/bulk_import.py
"""
Bulk import of interns, teams and projects.

Every row of the 14-column layout describes one intern, optionally the
team they belong to and a project that team works on. The batch is
reconciled in three dependency tiers, each scanning the whole file:

1. Interns  - create or refresh every intern (first row per code wins)
2. Teams    - create every team and settle its leader
3. Projects - link intern -> team -> project, one success per row

Because tier N+1 starts only after tier N has been committed, a row may
reference a team whose leader is declared further down the file.

Usage:
    from app.services.reconciliation import BulkImportService

    service = BulkImportService()
    with open("interns.csv", "rb") as f:
        result = service.import_file(db, f, "interns.csv")

    print(f"{result.success_count} rows linked, {result.failed_count} failed")
    for line in result.errors:
        print(line)
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO

from sqlalchemy.orm import Session

from app.models import ProjectStatus
from app.services.constants import (
    BULK_IMPORT_WIDTH,
    COL_INTERN_CODE,
    COL_INTERN_EMAIL,
    COL_INTERN_INSTITUTE,
    COL_INTERN_NAME,
    COL_PROJECT_DESCRIPTION,
    COL_PROJECT_MANAGER,
    COL_PROJECT_NAME,
    COL_PROJECT_START,
    COL_PROJECT_STATUS,
    COL_PROJECT_TARGET,
    COL_TEAM_LEADER,
    COL_TEAM_NAME,
    COL_TRAINING_END,
    COL_TRAINING_START,
)
from app.services.exceptions import RowRejectedError
from app.services.reconciliation.base import PhasedReconciler
from app.services.reconciliation.result import ImportResult
from app.services.reconciliation.values import optional, parse_date, parse_status
from app.services.tabular import TabularRow

logger = logging.getLogger(__name__)

INTERN_ERROR_PREFIX = "Intern processing error: "
TEAM_ERROR_PREFIX = "Team processing error: "
PROJECT_ERROR_PREFIX = "Project processing error: "


@dataclass
class TeamDeclaration:
    """What the file says about one team, gathered across all rows."""

    team_name: str
    first_line: int
    leader_code: str | None = None


class BulkImportService(PhasedReconciler):
    """
    Three-tier reconciler for the intern/team/project layout.

    Example:
        service = BulkImportService(strict_status=True)
        result = service.import_file(db, upload.file, upload.filename)
    """

    width = BULK_IMPORT_WIDTH

    def import_file(
            self,
            db: Session,
            file: BinaryIO,
            filename: str,
            content_type: str | None = None,
    ) -> ImportResult:
        """
        Import an intern/team/project file.

        Args:
            db: Database session (committed once per tier)
            file: Uploaded file (binary mode)
            filename: Original filename, used to pick the decoder
            content_type: Optional MIME type of the upload

        Returns:
            ImportResult with counts and line-numbered diagnostics
        """
        logger.info(f"Starting bulk import of {filename}")
        return self._execute(
            db,
            file,
            filename,
            content_type,
            phases=[self._import_interns, self._import_teams, self._import_projects],
        )

    # =========================================================================
    # TIER 1: INTERNS
    # =========================================================================

    def _import_interns(self, db: Session, rows: list[TabularRow], result: ImportResult) -> None:
        seen_codes: set[str] = set()

        for row in rows:
            if row.width < self.width:
                continue
            code = row.cell(COL_INTERN_CODE)
            name = row.cell(COL_INTERN_NAME)
            if not code or not name or code in seen_codes:
                continue

            # A failed row leaves the code open for a later row to supply it
            if self._run_unit(
                    db, row.line_number, result, INTERN_ERROR_PREFIX,
                    lambda row=row: self._upsert_intern(db, row),
            ):
                seen_codes.add(code)

        logger.info(f"Intern tier processed {len(seen_codes)} distinct codes")

    def _upsert_intern(self, db: Session, row: TabularRow) -> None:
        self._resolver.resolve_intern(
            db,
            row.cell(COL_INTERN_CODE),
            name=row.cell(COL_INTERN_NAME),
            email=optional(row.cell(COL_INTERN_EMAIL)),
            institute=optional(row.cell(COL_INTERN_INSTITUTE)),
            training_start_date=parse_date(row.cell(COL_TRAINING_START)),
            training_end_date=parse_date(row.cell(COL_TRAINING_END)),
        )

    # =========================================================================
    # TIER 2: TEAMS
    # =========================================================================

    def _import_teams(self, db: Session, rows: list[TabularRow], result: ImportResult) -> None:
        declarations = self._collect_team_declarations(rows)

        for declaration in declarations.values():
            self._run_unit(
                db, declaration.first_line, result, TEAM_ERROR_PREFIX,
                lambda declaration=declaration: self._settle_team(db, declaration, result),
            )

        logger.info(f"Team tier processed {len(declarations)} teams")

    def _collect_team_declarations(self, rows: list[TabularRow]) -> dict[str, TeamDeclaration]:
        """Team name -> declaration, in order of first appearance."""
        declarations: dict[str, TeamDeclaration] = {}

        for row in rows:
            if row.width < self.width:
                continue
            team_name = row.cell(COL_TEAM_NAME)
            if not team_name:
                continue

            declaration = declarations.get(team_name)
            if declaration is None:
                declaration = TeamDeclaration(team_name=team_name, first_line=row.line_number)
                declarations[team_name] = declaration

            leader_code = row.cell(COL_TEAM_LEADER)
            if leader_code:
                declaration.leader_code = leader_code

        return declarations

    def _settle_team(self, db: Session, declaration: TeamDeclaration, result: ImportResult) -> None:
        leader = None
        if declaration.leader_code:
            leader = self._resolver.find_intern(db, declaration.leader_code)
            if leader is None:
                result.add_error(
                    declaration.first_line,
                    f"Team leader with code '{declaration.leader_code}' not found",
                )

        team, _ = self._resolver.resolve_team(db, declaration.team_name)

        if leader is None:
            return
        if team.leader_id != leader.id:
            self._resolver.assign_leader(db, team, leader)
        else:
            self._resolver.ensure_membership(db, team, leader)

    # =========================================================================
    # TIER 3: PROJECTS
    # =========================================================================

    def _import_projects(self, db: Session, rows: list[TabularRow], result: ImportResult) -> None:
        for row in rows:
            linked = self._run_unit(
                db, row.line_number, result, PROJECT_ERROR_PREFIX,
                lambda row=row: self._link_row(db, row, result),
            )
            if linked:
                result.record_success()

    def _link_row(self, db: Session, row: TabularRow, result: ImportResult) -> None:
        self._require_width(row, self.width)

        code = row.cell(COL_INTERN_CODE)
        team_name = row.cell(COL_TEAM_NAME)
        project_name = row.cell(COL_PROJECT_NAME)

        if not code or (project_name and not team_name):
            raise RowRejectedError("Required fields missing")

        intern = self._resolver.find_intern(db, code)
        if intern is None:
            raise RowRejectedError(f"Intern with code '{code}' not found")

        # Intern without any team: nothing left to link
        if not team_name:
            return

        team = self._resolver.find_team(db, team_name)
        if team is None:
            raise RowRejectedError(f"Team '{team_name}' not found")

        self._resolver.ensure_membership(db, team, intern)

        # Team without any project: membership is the whole relationship
        if not project_name:
            return

        manager = None
        manager_code = row.cell(COL_PROJECT_MANAGER)
        if manager_code:
            manager = self._resolver.find_intern(db, manager_code)
            if manager is None:
                result.add_error(
                    row.line_number,
                    f"Project manager with code '{manager_code}' not found",
                )

        project, _ = self._resolver.resolve_project(
            db,
            project_name,
            description=optional(row.cell(COL_PROJECT_DESCRIPTION)),
            start_date=parse_date(row.cell(COL_PROJECT_START)),
            target_date=parse_date(row.cell(COL_PROJECT_TARGET)),
            status=parse_status(
                row.cell(COL_PROJECT_STATUS), ProjectStatus, strict=self._strict_status
            ),
            manager=manager,
            fallback_manager=team.leader,
        )
        self._resolver.ensure_assignment(db, project, team)
