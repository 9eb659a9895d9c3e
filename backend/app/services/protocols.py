# backend/app/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing classes satisfy protocols without modification
- Test mocks work without explicit inheritance
- Clear documentation of required interfaces
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.models import AuthUser, Intern, Project, Team


class AccountProvisionerProtocol(Protocol):
    """Interface required by IdentityResolutionService."""

    def ensure_account(self, db: Session, intern: Intern) -> AuthUser | None:
        ...

    def find_account(self, db: Session, intern: Intern) -> AuthUser | None:
        ...


class AuthorizationScopeProtocol(Protocol):
    """Interface required by ModuleImportService."""

    def teams_for_project(self, db: Session, project: Project) -> list[Team]:
        ...

    def members_of_team(self, db: Session, team: Team) -> list[Intern]:
        ...

    def participant_ids(self, db: Session, project: Project) -> set[int]:
        ...
