# backend/app/services/authorization_scope.py
"""
Project participation lookups.

Answers "which teams are assigned to project P" and "who belongs to team
T". The module import uses the union of both to decide whether an intern
may own a module or develop a function of the project.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Intern, Project, ProjectTeam, Team, TeamMember

logger = logging.getLogger(__name__)


class AuthorizationScopeService:
    """Read-only queries over team assignments and memberships."""

    def teams_for_project(self, db: Session, project: Project) -> list[Team]:
        """Teams assigned to the project, in assignment order."""
        stmt = (
            select(Team)
            .join(ProjectTeam, ProjectTeam.team_id == Team.id)
            .where(ProjectTeam.project_id == project.id)
            .order_by(ProjectTeam.id)
        )
        return list(db.scalars(stmt))

    def members_of_team(self, db: Session, team: Team) -> list[Intern]:
        """Interns that are members of the team, in joining order."""
        stmt = (
            select(Intern)
            .join(TeamMember, TeamMember.intern_id == Intern.id)
            .where(TeamMember.team_id == team.id)
            .order_by(TeamMember.id)
        )
        return list(db.scalars(stmt))

    def participant_ids(self, db: Session, project: Project) -> set[int]:
        """
        Ids of every intern who belongs to a team assigned to the project.

        Args:
            db: Database session
            project: Project whose participants are needed

        Returns:
            Set of intern ids (empty when no team is assigned)
        """
        participants: set[int] = set()
        for team in self.teams_for_project(db, project):
            participants.update(intern.id for intern in self.members_of_team(db, team))

        logger.debug(
            f"Project '{project.project_name}' has {len(participants)} participants"
        )
        return participants
