# backend/app/services/export/projector.py
"""
Flattening of the entity graph into import-shaped rows.

Rows are produced by plain nested iteration over entity x relationship x
terminal entity. A level with nothing below it still yields exactly one
row, with the columns it would have filled left as None:

    intern without teams         -> 1 row, team and project columns blank
    team without projects        -> 1 row, project columns blank
    intern on 2 teams x 2 projects -> 4 rows

Values keep their Python types (dates stay dates, statuses become their
names) so each writer can render them natively.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Intern, Module, ModuleFunction, Project, ProjectTeam, Team, TeamMember

logger = logging.getLogger(__name__)

ExportValue = str | date | None
ExportRow = list[ExportValue]


def _intern_code(intern: Intern | None) -> str | None:
    return intern.intern_code if intern is not None else None


class ExportProjector:
    """
    Builds export rows in the exact column order of the import layouts.

    Example:
        projector = ExportProjector()
        rows = projector.bulk_rows(db)
    """

    # =========================================================================
    # BULK LAYOUT
    # =========================================================================

    def bulk_rows(self, db: Session) -> list[ExportRow]:
        """One row per (intern, team, project) combination."""
        interns = db.scalars(select(Intern).order_by(Intern.id)).all()
        projects_by_team: dict[int, list[Project]] = {}

        rows: list[ExportRow] = []
        for intern in interns:
            intern_columns: ExportRow = [
                intern.intern_code,
                intern.name,
                intern.email,
                intern.institute,
                intern.training_start_date,
                intern.training_end_date,
            ]

            teams = self._teams_of(db, intern)
            if not teams:
                rows.append(intern_columns + [None] * 8)
                continue

            for team in teams:
                team_columns: ExportRow = [team.team_name, _intern_code(team.leader)]

                if team.id not in projects_by_team:
                    projects_by_team[team.id] = self._projects_of(db, team)
                projects = projects_by_team[team.id]

                if not projects:
                    rows.append(intern_columns + team_columns + [None] * 6)
                    continue

                for project in projects:
                    rows.append(intern_columns + team_columns + self._project_columns(project))

        logger.info(f"Projected {len(rows)} bulk export rows for {len(interns)} interns")
        return rows

    @staticmethod
    def _teams_of(db: Session, intern: Intern) -> list[Team]:
        stmt = (
            select(Team)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .where(TeamMember.intern_id == intern.id)
            .order_by(Team.id)
        )
        return list(db.scalars(stmt))

    @staticmethod
    def _projects_of(db: Session, team: Team) -> list[Project]:
        stmt = (
            select(Project)
            .join(ProjectTeam, ProjectTeam.project_id == Project.id)
            .where(ProjectTeam.team_id == team.id)
            .order_by(Project.id)
        )
        return list(db.scalars(stmt))

    @staticmethod
    def _project_columns(project: Project) -> ExportRow:
        return [
            project.project_name,
            project.description,
            _intern_code(project.manager),
            project.status.name if project.status else None,
            project.start_date,
            project.target_date,
        ]

    # =========================================================================
    # MODULE LAYOUT
    # =========================================================================

    def module_rows(self, db: Session, project: Project) -> list[ExportRow]:
        """One row per (module, function) of the project."""
        modules = db.scalars(
            select(Module).where(Module.project_id == project.id).order_by(Module.id)
        ).all()

        rows: list[ExportRow] = []
        for module in modules:
            module_columns: ExportRow = [
                module.module_name,
                module.description,
                _intern_code(module.owner),
                module.status.name if module.status else None,
            ]

            functions = db.scalars(
                select(ModuleFunction)
                .where(ModuleFunction.module_id == module.id)
                .order_by(ModuleFunction.id)
            ).all()

            if not functions:
                rows.append(module_columns + [None] * 4)
                continue

            for function in functions:
                rows.append(module_columns + [
                    function.function_name,
                    function.description,
                    _intern_code(function.developer),
                    function.status.name if function.status else None,
                ])

        logger.info(
            f"Projected {len(rows)} module export rows for project '{project.project_name}'"
        )
        return rows

