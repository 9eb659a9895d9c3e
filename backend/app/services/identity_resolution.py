# backend/app/services/identity_resolution.py
"""
Identity resolution service.

Maps a business key (intern code, team name, project name, module name
within a project, function name within a module) to its persisted entity,
creating the entity on first sighting:

1. Look the entity up by business key (never by surrogate id)
2. If found -> merge the non-empty candidate attributes into it
3. If not found -> create it inside a SAVEPOINT and flush
4. For interns only, a newly created entity also gets an access account

Candidate attributes follow one rule: ``None`` (or a blank string) means
"not supplied" and never overwrites a stored value.

Design Principles:
- Single Responsibility: Only handles entity identity and upserts
- Dependency Injection: Account provisioner is injected via constructor
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Caller owns the transaction: this service flushes, it never commits

Usage:
    from app.services.identity_resolution import IdentityResolutionService

    resolver = IdentityResolutionService()
    intern, created = resolver.resolve_intern(db, "P001", name="Alice")
"""

import logging
from datetime import date
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import (
    FunctionStatus,
    Intern,
    Module,
    ModuleFunction,
    ModuleStatus,
    Project,
    ProjectStatus,
    ProjectTeam,
    Team,
    TeamMember,
)
from app.services.account_provisioning import AccountProvisioningService
from app.services.exceptions import DuplicateKeyError
from app.services.protocols import AccountProvisionerProtocol

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")


def _is_unique_constraint_violation(integrity_error: IntegrityError) -> bool:
    """
    Check if an IntegrityError is caused by a unique constraint violation.

    Args:
        integrity_error: The SQLAlchemy IntegrityError to check

    Returns:
        True if this is a unique constraint violation, False otherwise
    """
    # PostgreSQL error code 23505 = unique_violation
    if hasattr(integrity_error.orig, 'pgcode'):
        return integrity_error.orig.pgcode == '23505'
    # SQLite reports "UNIQUE constraint failed: ..."
    return 'unique constraint' in str(integrity_error.orig).lower()


def _is_supplied(value: Any) -> bool:
    """A candidate attribute counts only when it is not None and not blank."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def _merge_attributes(entity: Any, attributes: dict[str, Any]) -> list[str]:
    """
    Copy supplied attributes onto an entity.

    Returns:
        Names of the attributes whose stored value actually changed
    """
    changed = []
    for attribute, value in attributes.items():
        if not _is_supplied(value):
            continue
        if getattr(entity, attribute) != value:
            setattr(entity, attribute, value)
            changed.append(attribute)
    return changed


class IdentityResolutionService:
    """
    Resolves business keys to entities with create-or-merge semantics.

    Example:
        resolver = IdentityResolutionService()

        team, created = resolver.resolve_team(db, "Backend")
        resolver.assign_leader(db, team, alice)
    """

    def __init__(self, provisioner: AccountProvisionerProtocol | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            provisioner: Account provisioner used for newly created interns.
                         Defaults to AccountProvisioningService.
        """
        self._provisioner = provisioner or AccountProvisioningService()

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def find_intern(self, db: Session, intern_code: str) -> Intern | None:
        if not intern_code:
            return None
        return db.scalar(select(Intern).where(Intern.intern_code == intern_code))

    def find_team(self, db: Session, team_name: str) -> Team | None:
        if not team_name:
            return None
        return db.scalar(select(Team).where(Team.team_name == team_name))

    def find_project(self, db: Session, project_name: str) -> Project | None:
        if not project_name:
            return None
        return db.scalar(select(Project).where(Project.project_name == project_name))

    def find_module(self, db: Session, project: Project, module_name: str) -> Module | None:
        if not module_name:
            return None
        stmt = select(Module).where(
            Module.project_id == project.id,
            Module.module_name == module_name,
        )
        return db.scalar(stmt)

    def find_function(
            self,
            db: Session,
            module: Module,
            function_name: str,
    ) -> ModuleFunction | None:
        if not function_name:
            return None
        stmt = select(ModuleFunction).where(
            ModuleFunction.module_id == module.id,
            ModuleFunction.function_name == function_name,
        )
        return db.scalar(stmt)

    # =========================================================================
    # ENTITY RESOLUTION
    # =========================================================================

    def resolve_intern(
            self,
            db: Session,
            intern_code: str,
            *,
            name: str | None = None,
            email: str | None = None,
            institute: str | None = None,
            training_start_date: date | None = None,
            training_end_date: date | None = None,
    ) -> tuple[Intern, bool]:
        """
        Resolve an intern by code, creating it (and its account) if unseen.

        Args:
            db: Database session
            intern_code: Business key
            name: Required when the intern does not exist yet

        Returns:
            Tuple of (intern, was_created)

        Raises:
            DuplicateKeyError: If the insert hits a unique constraint
        """
        attributes = {
            "name": name,
            "email": email,
            "institute": institute,
            "training_start_date": training_start_date,
            "training_end_date": training_end_date,
        }

        intern = self.find_intern(db, intern_code)
        if intern is not None:
            changed = _merge_attributes(intern, attributes)
            if changed:
                logger.debug(f"Updated intern {intern_code}: {', '.join(changed)}")
            return intern, False

        intern = Intern(intern_code=intern_code)
        _merge_attributes(intern, attributes)
        self._persist_new(db, intern, "Intern", intern_code)
        logger.info(f"Created intern {intern_code}")

        self._provisioner.ensure_account(db, intern)
        return intern, True

    def resolve_team(self, db: Session, team_name: str) -> tuple[Team, bool]:
        """Resolve a team by name. Leadership is handled by assign_leader()."""
        team = self.find_team(db, team_name)
        if team is not None:
            return team, False

        team = Team(team_name=team_name)
        self._persist_new(db, team, "Team", team_name)
        logger.info(f"Created team '{team_name}'")
        return team, True

    def resolve_project(
            self,
            db: Session,
            project_name: str,
            *,
            description: str | None = None,
            start_date: date | None = None,
            target_date: date | None = None,
            status: ProjectStatus | None = None,
            manager: Intern | None = None,
            fallback_manager: Intern | None = None,
    ) -> tuple[Project, bool]:
        """
        Resolve a project by name.

        Args:
            db: Database session
            project_name: Business key
            status: Parsed status; None keeps the stored one (PLANNED on create)
            manager: Declared manager, linked together with their account
            fallback_manager: Manager used only when creating a project
                              without a declared manager (the team leader)

        Returns:
            Tuple of (project, was_created)
        """
        attributes = {
            "description": description,
            "start_date": start_date,
            "target_date": target_date,
            "status": status,
        }

        project = self.find_project(db, project_name)
        if project is not None:
            changed = _merge_attributes(project, attributes)
            if manager is not None and project.manager_id != manager.id:
                self._set_manager(db, project, manager)
                changed.append("manager")
            if changed:
                logger.debug(f"Updated project '{project_name}': {', '.join(changed)}")
            return project, False

        project = Project(project_name=project_name, status=ProjectStatus.PLANNED)
        _merge_attributes(project, attributes)
        effective_manager = manager or fallback_manager
        if effective_manager is not None:
            self._set_manager(db, project, effective_manager)

        self._persist_new(db, project, "Project", project_name)
        logger.info(f"Created project '{project_name}'")
        return project, True

    def resolve_module(
            self,
            db: Session,
            project: Project,
            module_name: str,
            *,
            description: str | None = None,
            owner: Intern | None = None,
            status: ModuleStatus | None = None,
    ) -> tuple[Module, bool]:
        """Resolve a module by (name, project). Status defaults to NOT_STARTED."""
        attributes = {"description": description, "owner": owner, "status": status}

        module = self.find_module(db, project, module_name)
        if module is not None:
            _merge_attributes(module, attributes)
            return module, False

        module = Module(
            module_name=module_name,
            project_id=project.id,
            status=ModuleStatus.NOT_STARTED,
        )
        _merge_attributes(module, attributes)
        self._persist_new(db, module, "Module", module_name)
        logger.info(f"Created module '{module_name}' in project '{project.project_name}'")
        return module, True

    def resolve_function(
            self,
            db: Session,
            module: Module,
            function_name: str,
            *,
            description: str | None = None,
            developer: Intern | None = None,
            status: FunctionStatus | None = None,
    ) -> tuple[ModuleFunction, bool]:
        """Resolve a function by (name, module). Status defaults to PENDING."""
        attributes = {"description": description, "developer": developer, "status": status}

        function = self.find_function(db, module, function_name)
        if function is not None:
            _merge_attributes(function, attributes)
            return function, False

        function = ModuleFunction(
            function_name=function_name,
            module_id=module.id,
            status=FunctionStatus.PENDING,
        )
        _merge_attributes(function, attributes)
        self._persist_new(db, function, "Function", function_name)
        logger.debug(f"Created function '{function_name}' in module '{module.module_name}'")
        return function, True

    # =========================================================================
    # RELATIONSHIPS
    # =========================================================================

    def ensure_membership(self, db: Session, team: Team, intern: Intern) -> bool:
        """
        Add the intern to the team unless already a member.

        Returns:
            True if a membership was created
        """
        stmt = select(TeamMember.id).where(
            TeamMember.team_id == team.id,
            TeamMember.intern_id == intern.id,
        )
        if db.scalar(stmt) is not None:
            return False

        membership = TeamMember(team_id=team.id, intern_id=intern.id)
        self._persist_new(
            db, membership, "Team membership", f"{team.team_name}/{intern.intern_code}"
        )
        logger.debug(f"Added {intern.intern_code} to team '{team.team_name}'")
        return True

    def ensure_assignment(self, db: Session, project: Project, team: Team) -> bool:
        """
        Assign the team to the project unless already assigned.

        Returns:
            True if an assignment was created
        """
        stmt = select(ProjectTeam.id).where(
            ProjectTeam.project_id == project.id,
            ProjectTeam.team_id == team.id,
        )
        if db.scalar(stmt) is not None:
            return False

        assignment = ProjectTeam(project_id=project.id, team_id=team.id)
        self._persist_new(
            db, assignment, "Project assignment", f"{project.project_name}/{team.team_name}"
        )
        logger.debug(f"Assigned team '{team.team_name}' to project '{project.project_name}'")
        return True

    def assign_leader(self, db: Session, team: Team, intern: Intern) -> None:
        """
        Make the intern the team's leader.

        The leader's access account is linked when one exists, and the
        leader is always added as a member of the team.
        """
        team.leader = intern
        team.leader_account = self._provisioner.find_account(db, intern)
        db.flush()
        self.ensure_membership(db, team, intern)
        logger.info(f"Team '{team.team_name}' is now led by {intern.intern_code}")

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _set_manager(self, db: Session, project: Project, manager: Intern) -> None:
        project.manager = manager
        project.manager_account = self._provisioner.find_account(db, manager)

    @staticmethod
    def _persist_new(db: Session, entity: EntityT, entity_type: str, key: str) -> EntityT:
        """
        Insert a new entity inside its own SAVEPOINT.

        A unique violation rolls back only the savepoint and surfaces as
        DuplicateKeyError; any other integrity problem is re-raised.
        """
        try:
            with db.begin_nested():
                db.add(entity)
                db.flush()
        except IntegrityError as e:
            if not _is_unique_constraint_violation(e):
                logger.error(f"{entity_type} creation failed for '{key}' with unexpected error: {e}")
                raise
            logger.warning(f"{entity_type} '{key}' already exists, insert rejected")
            raise DuplicateKeyError(entity_type, key) from e
        return entity
