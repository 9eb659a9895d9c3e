# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite with SAVEPOINT support)
- A TestClient wired to the test session
- In-memory CSV / XLSX upload builders
- Entity factories
"""

import os

# Must be set before anything imports app.config
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("APP_NAME", "Test App")

import csv
import io
import zipfile
from collections.abc import Iterator, Sequence

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import configure_sqlite_transactions, get_db
from app.main import app
from app.models import (
    Base,
    Intern,
    Project,
    ProjectTeam,
    Team,
    TeamMember,
)
from app.services.constants import BULK_IMPORT_COLUMNS, MODULE_IMPORT_COLUMNS


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite_transactions(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db: Session) -> Iterator[TestClient]:
    """Create TestClient with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# FILE BUILDERS
# =============================================================================

def bulk_row(**values: str) -> list[str]:
    """A 14-column row; unspecified columns are blank."""
    return [values.get(column, "") for column in BULK_IMPORT_COLUMNS]


def module_row(**values: str) -> list[str]:
    """An 8-column row; unspecified columns are blank."""
    return [values.get(column, "") for column in MODULE_IMPORT_COLUMNS]


def csv_bytes(rows: Sequence[Sequence[str]], header: Sequence[str] = BULK_IMPORT_COLUMNS) -> bytes:
    """Render a header plus rows as UTF-8 CSV."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue().encode("utf-8")


def csv_file(rows: Sequence[Sequence[str]], header: Sequence[str] = BULK_IMPORT_COLUMNS) -> io.BytesIO:
    return io.BytesIO(csv_bytes(rows, header))


def xlsx_bytes(rows: Sequence[Sequence[object]], header: Sequence[str] = BULK_IMPORT_COLUMNS) -> bytes:
    """Render a header plus rows as a single-sheet workbook."""
    wb = Workbook()
    ws = wb.active
    ws.append(list(header))
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def truncate_sheet_xml(content: bytes) -> bytes:
    """Rewrite a workbook with its first sheet's XML cut off halfway."""
    source = zipfile.ZipFile(io.BytesIO(content))
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as target:
        for item in source.infolist():
            data = source.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                data = data[: len(data) // 2]
            target.writestr(item.filename, data)
    return buf.getvalue()


# =============================================================================
# ENTITY FACTORIES
# =============================================================================

def create_intern(
        db: Session,
        intern_code: str,
        name: str | None = None,
        email: str | None = None,
) -> Intern:
    """Factory: Create an intern."""
    intern = Intern(intern_code=intern_code, name=name or f"Intern {intern_code}", email=email)
    db.add(intern)
    db.commit()
    db.refresh(intern)
    return intern


def create_team(db: Session, team_name: str, members: Sequence[Intern] = ()) -> Team:
    """Factory: Create a team with the given members."""
    team = Team(team_name=team_name)
    db.add(team)
    db.flush()
    for intern in members:
        db.add(TeamMember(team_id=team.id, intern_id=intern.id))
    db.commit()
    db.refresh(team)
    return team


def create_project(db: Session, project_name: str, teams: Sequence[Team] = ()) -> Project:
    """Factory: Create a project assigned to the given teams."""
    project = Project(project_name=project_name)
    db.add(project)
    db.flush()
    for team in teams:
        db.add(ProjectTeam(project_id=project.id, team_id=team.id))
    db.commit()
    db.refresh(project)
    return project
