# backend/app/models.py
import enum
from datetime import date, datetime, timezone

from sqlalchemy import String, Text, Date, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enums help enforce data integrity at the database level
class AccountRole(str, enum.Enum):
    ADMIN = "ADMIN"
    INTERN = "INTERN"


class ProjectStatus(str, enum.Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ON_HOLD = "ON_HOLD"


class ModuleStatus(str, enum.Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class FunctionStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_DEVELOPMENT = "IN_DEVELOPMENT"
    COMPLETED = "COMPLETED"


class Intern(Base):
    """
    A trainee, identified by their intern code.

    The code is the business key used by every import; the surrogate id is
    never exposed in files.
    """
    __tablename__ = "interns"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    intern_code: Mapped[str] = mapped_column(String, unique=True, index=True)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str | None] = mapped_column(String, index=True)
    institute: Mapped[str | None] = mapped_column(String)
    training_start_date: Mapped[date | None] = mapped_column(Date)
    training_end_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    memberships: Mapped[list["TeamMember"]] = relationship(
        back_populates="intern",
        cascade="all, delete-orphan",
        order_by="TeamMember.id",
    )


class AuthUser(Base):
    """
    Access account in the user directory.

    Interns discovered by an import get an INTERN account keyed by email so
    they can sign in; the password stays empty until they set one.
    """
    __tablename__ = "auth_users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    password: Mapped[str] = mapped_column(String, default="")
    role: Mapped[AccountRole] = mapped_column(Enum(AccountRole), default=AccountRole.INTERN)
    name: Mapped[str] = mapped_column(String)
    trainee_id: Mapped[str | None] = mapped_column(String, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    team_name: Mapped[str] = mapped_column(String, unique=True, index=True)
    leader_id: Mapped[int | None] = mapped_column(ForeignKey("interns.id"), index=True)
    leader_account_id: Mapped[int | None] = mapped_column(ForeignKey("auth_users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    leader: Mapped["Intern | None"] = relationship(foreign_keys=[leader_id])
    leader_account: Mapped["AuthUser | None"] = relationship(foreign_keys=[leader_account_id])
    members: Mapped[list["TeamMember"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMember.id",
    )
    project_assignments: Mapped[list["ProjectTeam"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="ProjectTeam.id",
    )


class TeamMember(Base):
    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint('team_id', 'intern_id', name='uq_team_member'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), index=True)
    intern_id: Mapped[int] = mapped_column(ForeignKey("interns.id"), index=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    team: Mapped["Team"] = relationship(back_populates="members")
    intern: Mapped["Intern"] = relationship(back_populates="memberships")


class Project(Base):
    """
    A project, identified by its name.

    Ownership is modelled through ProjectTeam rather than a single foreign
    key because one project may involve several teams.
    """
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    project_name: Mapped[str] = mapped_column(String, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[date | None] = mapped_column(Date)
    target_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[ProjectStatus] = mapped_column(Enum(ProjectStatus), default=ProjectStatus.PLANNED)
    manager_id: Mapped[int | None] = mapped_column(ForeignKey("interns.id"), index=True)
    manager_account_id: Mapped[int | None] = mapped_column(ForeignKey("auth_users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    manager: Mapped["Intern | None"] = relationship(foreign_keys=[manager_id])
    manager_account: Mapped["AuthUser | None"] = relationship(foreign_keys=[manager_account_id])
    team_assignments: Mapped[list["ProjectTeam"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectTeam.id",
    )
    modules: Mapped[list["Module"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Module.id",
    )


class ProjectTeam(Base):
    __tablename__ = "project_teams"
    __table_args__ = (
        UniqueConstraint('project_id', 'team_id', name='uq_project_team'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), index=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), index=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    project: Mapped["Project"] = relationship(back_populates="team_assignments")
    team: Mapped["Team"] = relationship(back_populates="project_assignments")


class Module(Base):
    """
    A unit of work inside a project.

    Module names are only unique within their project.
    """
    __tablename__ = "modules"
    __table_args__ = (
        UniqueConstraint('module_name', 'project_id', name='uq_module_project'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    module_name: Mapped[str] = mapped_column(String, index=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[int | None] = mapped_column(ForeignKey("interns.id"), index=True)
    status: Mapped[ModuleStatus] = mapped_column(Enum(ModuleStatus), default=ModuleStatus.NOT_STARTED)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    project: Mapped["Project"] = relationship(back_populates="modules")
    owner: Mapped["Intern | None"] = relationship(foreign_keys=[owner_id])
    functions: Mapped[list["ModuleFunction"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="ModuleFunction.id",
    )


class ModuleFunction(Base):
    __tablename__ = "functions"
    __table_args__ = (
        UniqueConstraint('function_name', 'module_id', name='uq_function_module'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    function_name: Mapped[str] = mapped_column(String, index=True)
    module_id: Mapped[int] = mapped_column(ForeignKey("modules.id"), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    developer_id: Mapped[int | None] = mapped_column(ForeignKey("interns.id"), index=True)
    status: Mapped[FunctionStatus] = mapped_column(Enum(FunctionStatus), default=FunctionStatus.PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    module: Mapped["Module"] = relationship(back_populates="functions")
    developer: Mapped["Intern | None"] = relationship(foreign_keys=[developer_id])
