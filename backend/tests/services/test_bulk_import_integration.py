# backend/tests/services/test_bulk_import_integration.py
"""
Integration tests for BulkImportService.

These tests verify the complete pipeline with real database operations:
file content -> decoder -> intern tier -> team tier -> project tier -> DB

Test Methodology:
    1. Build CSV/XLSX content in memory
    2. Call BulkImportService.import_file()
    3. Check the returned counters and diagnostics
    4. Query the tables to verify the stored graph

Design Principles:
    - Each test is independent and isolated
    - Uses in-memory files (no file I/O)
    - Verifies both service result AND database state
"""

import io
from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models import (
    AuthUser,
    Intern,
    Project,
    ProjectStatus,
    ProjectTeam,
    Team,
    TeamMember,
)
from app.services.constants import BULK_IMPORT_COLUMNS
from app.services.export import ExportProjector, write_csv, write_xlsx
from app.services.reconciliation import BulkImportService

from tests.conftest import bulk_row, csv_bytes, csv_file, truncate_sheet_xml, xlsx_bytes


# =============================================================================
# HELPERS
# =============================================================================

def alice_row(**overrides: str) -> list[str]:
    values = {
        "intern_code": "P001",
        "name": "Alice",
        "email": "alice@example.com",
        "institute": "TU Berlin",
        "training_start_date": "01/02/2024",
        "training_end_date": "30/06/2024",
        "team_name": "Backend",
        "team_leader_intern_code": "P001",
        "project_name": "Payments",
        "project_description": "Payment service",
        "project_manager_id": "P001",
        "project_status": "IN_PROGRESS",
        "project_start_date": "01/03/2024",
        "project_target_date": "31/05/2024",
    }
    values.update(overrides)
    return bulk_row(**values)


def count(db: Session, model) -> int:
    return db.scalar(select(func.count(model.id)))


def get_intern(db: Session, code: str) -> Intern:
    return db.scalar(select(Intern).where(Intern.intern_code == code))


def get_team(db: Session, name: str) -> Team:
    return db.scalar(select(Team).where(Team.team_name == name))


def get_project(db: Session, name: str) -> Project:
    return db.scalar(select(Project).where(Project.project_name == name))


def member_codes(db: Session, team: Team) -> list[str]:
    stmt = (
        select(Intern.intern_code)
        .join(TeamMember, TeamMember.intern_id == Intern.id)
        .where(TeamMember.team_id == team.id)
        .order_by(TeamMember.id)
    )
    return list(db.scalars(stmt))


@pytest.fixture
def service() -> BulkImportService:
    return BulkImportService(strict_status=False)


# =============================================================================
# BASIC SCENARIO
# =============================================================================

class TestSingleRowScenario:
    """
    One row describing Alice, her team Backend (led by her) and the
    project Payments managed by her.
    """

    def test_creates_whole_graph(self, db, service):
        result = service.import_file(db, csv_file([alice_row()]), "interns.csv")

        assert result.success_count == 1
        assert result.failed_count == 0
        assert result.errors == []

        alice = get_intern(db, "P001")
        assert alice.name == "Alice"
        assert alice.institute == "TU Berlin"
        assert alice.training_start_date == date(2024, 2, 1)
        assert alice.training_end_date == date(2024, 6, 30)

        backend = get_team(db, "Backend")
        assert backend.leader_id == alice.id
        assert member_codes(db, backend) == ["P001"]

        payments = get_project(db, "Payments")
        assert payments.description == "Payment service"
        assert payments.status == ProjectStatus.IN_PROGRESS
        assert payments.manager_id == alice.id
        assert payments.start_date == date(2024, 3, 1)
        assert payments.target_date == date(2024, 5, 31)
        assert count(db, ProjectTeam) == 1

    def test_new_intern_gets_account_linked_as_leader_and_manager(self, db, service):
        service.import_file(db, csv_file([alice_row()]), "interns.csv")

        account = db.scalar(select(AuthUser).where(AuthUser.email == "alice@example.com"))
        assert account.trainee_id == "P001"
        assert get_team(db, "Backend").leader_account_id == account.id
        assert get_project(db, "Payments").manager_account_id == account.id

    def test_reimport_is_idempotent(self, db, service):
        content = csv_bytes([alice_row()])

        service.import_file(db, io.BytesIO(content), "interns.csv")
        result = service.import_file(db, io.BytesIO(content), "interns.csv")

        assert result.success_count == 1
        assert result.failed_count == 0
        assert count(db, Intern) == 1
        assert count(db, AuthUser) == 1
        assert count(db, Team) == 1
        assert count(db, TeamMember) == 1
        assert count(db, Project) == 1
        assert count(db, ProjectTeam) == 1

    def test_excel_upload_matches_csv(self, db, service):
        result = service.import_file(db, io.BytesIO(xlsx_bytes([alice_row()])), "interns.xlsx")

        assert result.success_count == 1
        assert get_project(db, "Payments").manager_id == get_intern(db, "P001").id

    def test_excel_native_dates_and_numeric_codes(self, db, service):
        row: list[object] = alice_row(intern_code="", team_leader_intern_code="", project_manager_id="")
        row[0] = 1234
        row[4] = date(2024, 2, 1)

        result = service.import_file(db, io.BytesIO(xlsx_bytes([row])), "interns.xlsx")

        assert result.errors == []
        intern = get_intern(db, "1234")
        assert intern.training_start_date == date(2024, 2, 1)


# =============================================================================
# UPSERT SEMANTICS
# =============================================================================

class TestNonDestructiveUpsert:
    """Blank cells never erase stored values; non-blank cells update them."""

    def test_blank_cells_keep_stored_values(self, db, service):
        service.import_file(db, csv_file([alice_row()]), "first.csv")

        sparse = alice_row(
            email="", institute="", training_start_date="", training_end_date="",
            team_leader_intern_code="", project_description="", project_manager_id="",
            project_status="", project_start_date="", project_target_date="",
        )
        result = service.import_file(db, csv_file([sparse]), "second.csv")

        assert result.success_count == 1
        alice = get_intern(db, "P001")
        assert alice.email == "alice@example.com"
        assert alice.institute == "TU Berlin"
        payments = get_project(db, "Payments")
        assert payments.description == "Payment service"
        assert payments.status == ProjectStatus.IN_PROGRESS
        assert payments.manager_id == alice.id
        assert get_team(db, "Backend").leader_id == alice.id

    def test_non_blank_cells_update(self, db, service):
        service.import_file(db, csv_file([alice_row()]), "first.csv")

        changed = alice_row(institute="TU Munich", project_status="completed")
        service.import_file(db, csv_file([changed]), "second.csv")

        assert get_intern(db, "P001").institute == "TU Munich"
        assert get_project(db, "Payments").status == ProjectStatus.COMPLETED

    def test_first_row_per_intern_code_wins(self, db, service):
        rows = [
            alice_row(institute="TU Berlin"),
            alice_row(institute="Elsewhere", project_name="Billing"),
        ]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.success_count == 2
        assert get_intern(db, "P001").institute == "TU Berlin"


# =============================================================================
# DEPENDENCY ORDERING
# =============================================================================

class TestDependencyTiers:
    """Later rows can supply what earlier rows depend on."""

    def test_leader_declared_on_later_row(self, db, service):
        rows = [
            bulk_row(intern_code="P002", name="Bob", team_name="Backend", project_name="Payments"),
            bulk_row(intern_code="P001", name="Alice", team_name="Backend",
                     team_leader_intern_code="P001", project_name="Payments"),
        ]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.success_count == 2
        assert result.errors == []
        alice = get_intern(db, "P001")
        backend = get_team(db, "Backend")
        assert backend.leader_id == alice.id
        # A new project without a declared manager is managed by the team leader
        assert get_project(db, "Payments").manager_id == alice.id
        assert member_codes(db, backend) == ["P001", "P002"]

    def test_leader_from_another_team_row_becomes_member(self, db, service):
        rows = [
            bulk_row(intern_code="P001", name="Alice", team_name="Frontend"),
            bulk_row(intern_code="P002", name="Bob", team_name="Backend",
                     team_leader_intern_code="P001"),
        ]

        service.import_file(db, csv_file(rows), "interns.csv")

        backend = get_team(db, "Backend")
        assert backend.leader_id == get_intern(db, "P001").id
        assert "P001" in member_codes(db, backend)

    def test_one_project_shared_by_two_teams(self, db, service):
        rows = [
            bulk_row(intern_code="P001", name="Alice", team_name="Backend", project_name="Payments"),
            bulk_row(intern_code="P002", name="Bob", team_name="Frontend", project_name="Payments"),
        ]

        service.import_file(db, csv_file(rows), "interns.csv")

        assert count(db, Project) == 1
        assert count(db, ProjectTeam) == 2


# =============================================================================
# ROW-LEVEL DIAGNOSTICS
# =============================================================================

class TestRowDiagnostics:
    """Failing rows are reported by line and do not stop the batch."""

    def test_unknown_intern_code(self, db, service):
        rows = [
            alice_row(),
            bulk_row(intern_code="P999", team_name="Backend", project_name="Payments"),
        ]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.success_count == 1
        assert result.failed_count == 1
        assert result.errors == ["line 3: Intern with code 'P999' not found"]

    def test_missing_intern_code(self, db, service):
        rows = [bulk_row(name="Nobody", team_name="Backend", project_name="Payments")]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.failed_count == 1
        assert result.errors == ["line 2: Required fields missing"]

    def test_project_without_team(self, db, service):
        rows = [bulk_row(intern_code="P001", name="Alice", project_name="Payments")]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.errors == ["line 2: Required fields missing"]
        assert count(db, Project) == 0

    def test_intern_only_and_membership_only_rows_succeed(self, db, service):
        rows = [
            bulk_row(intern_code="P001", name="Alice"),
            bulk_row(intern_code="P002", name="Bob", team_name="Backend"),
        ]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.success_count == 2
        assert result.errors == []
        assert member_codes(db, get_team(db, "Backend")) == ["P002"]

    def test_short_row(self, db, service):
        content = csv_bytes([alice_row()]) + b"P002,Bob,bob@example.com\n"

        result = service.import_file(db, io.BytesIO(content), "interns.csv")

        assert result.success_count == 1
        assert result.errors == ["line 3: Invalid format: expected 14 columns"]
        assert get_intern(db, "P002") is None

    def test_bad_date_fails_intern_tier_and_link(self, db, service):
        rows = [alice_row(training_start_date="31/31/2024")]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.success_count == 0
        assert result.failed_count == 2
        assert result.errors[0].startswith(
            "line 2: Intern processing error: Unable to parse date: 31/31/2024"
        )
        assert result.errors[1:] == [
            "line 2: Team leader with code 'P001' not found",
            "line 2: Intern with code 'P001' not found",
        ]

    def test_failed_intern_row_does_not_block_later_row_for_same_code(self, db, service):
        rows = [
            alice_row(training_start_date="31/31/2024"),
            alice_row(training_start_date="01/01/2024", project_name="Billing"),
        ]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.success_count == 2
        assert result.failed_count == 1
        assert len(result.errors) == 1
        assert result.errors[0].startswith(
            "line 2: Intern processing error: Unable to parse date: 31/31/2024"
        )
        assert get_intern(db, "P001").training_start_date == date(2024, 1, 1)

    def test_unexpected_error_is_reported_on_its_line(self, db, service):
        with patch.object(service._resolver, "resolve_intern", side_effect=RuntimeError("boom")):
            result = service.import_file(db, csv_file([alice_row()]), "interns.csv")

        assert result.errors[0] == "line 2: Intern processing error: boom"
        assert "line 2: Intern with code 'P001' not found" in result.errors

    def test_bad_project_date_rolls_back_row(self, db, service):
        rows = [alice_row(project_target_date="someday")]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.failed_count == 1
        assert result.errors[0].startswith("line 2: Project processing error: Unable to parse date")
        assert count(db, Project) == 0
        # Intern and team tiers were committed before the failing row
        assert get_intern(db, "P001") is not None
        assert get_team(db, "Backend") is not None

    def test_unknown_leader_and_manager_are_reported_without_failing(self, db, service):
        rows = [alice_row(team_leader_intern_code="P404", project_manager_id="P405")]

        result = service.import_file(db, csv_file(rows), "interns.csv")

        assert result.success_count == 1
        assert result.failed_count == 0
        assert result.errors == [
            "line 2: Team leader with code 'P404' not found",
            "line 2: Project manager with code 'P405' not found",
        ]
        assert get_team(db, "Backend").leader_id is None
        assert get_project(db, "Payments").manager_id is None


# =============================================================================
# STATUS HANDLING
# =============================================================================

class TestStatusHandling:
    """Unknown statuses: default when lenient, row failure when strict."""

    def test_lenient_unknown_status_uses_default(self, db, service):
        result = service.import_file(
            db, csv_file([alice_row(project_status="ARCHIVED")]), "interns.csv"
        )

        assert result.success_count == 1
        assert get_project(db, "Payments").status == ProjectStatus.PLANNED

    def test_strict_unknown_status_fails_row(self, db):
        strict = BulkImportService(strict_status=True)

        result = strict.import_file(
            db, csv_file([alice_row(project_status="ARCHIVED")]), "interns.csv"
        )

        assert result.success_count == 0
        assert result.failed_count == 1
        assert result.errors == [
            "line 2: Project processing error: Unknown status 'ARCHIVED'. "
            "Allowed values: PLANNED, IN_PROGRESS, COMPLETED, ON_HOLD"
        ]
        assert count(db, Project) == 0


# =============================================================================
# FILE-LEVEL OUTCOMES
# =============================================================================

class TestFileLevel:
    """Problems with the file as a whole abort before any tier."""

    def test_header_only_file(self, db, service):
        result = service.import_file(db, csv_file([]), "interns.csv")

        assert (result.success_count, result.failed_count, result.errors) == (0, 0, [])

    def test_unsupported_file_type(self, db, service):
        result = service.import_file(db, io.BytesIO(b"a,b"), "interns.txt")

        assert result.total_count == 0
        assert result.errors == ["line 0: Only CSV and Excel (.xlsx) files are supported"]

    def test_corrupt_workbook(self, db, service):
        result = service.import_file(db, io.BytesIO(b"garbage"), "interns.xlsx")

        assert result.total_count == 0
        assert len(result.errors) == 1
        assert result.errors[0].startswith(
            "line 0: File processing error: Could not read 'interns.xlsx'"
        )
        assert count(db, Intern) == 0

    def test_damaged_sheet_xml(self, db, service):
        content = truncate_sheet_xml(xlsx_bytes([alice_row(), alice_row(intern_code="P002")]))

        result = service.import_file(db, io.BytesIO(content), "interns.xlsx")

        assert result.total_count == 0
        assert len(result.errors) == 1
        assert result.errors[0].startswith("line 0: File processing error:")
        assert count(db, Intern) == 0


# =============================================================================
# ROUND TRIP
# =============================================================================

class TestRoundTrip:
    """Exported files import back without changes or failures."""

    def _seed(self, db: Session, service: BulkImportService) -> None:
        rows = [
            alice_row(project_name="Payments, Core", project_description='Says "hi"'),
            alice_row(project_name="Billing", project_status="ON_HOLD"),
            bulk_row(intern_code="P002", name="Bob", team_name="Frontend",
                     team_leader_intern_code="P002"),
            bulk_row(intern_code="P003", name="Carol", training_end_date="2024-12-31"),
        ]
        result = service.import_file(db, csv_file(rows), "seed.csv")
        assert result.failed_count == 0

    def test_csv_round_trip(self, db, service):
        self._seed(db, service)
        projector = ExportProjector()
        before = projector.bulk_rows(db)
        exported = write_csv(BULK_IMPORT_COLUMNS, before, "%d-%m-%Y")

        assert '"Payments, Core"' in exported

        result = service.import_file(db, io.BytesIO(exported.encode("utf-8")), "export.csv")

        assert result.failed_count == 0
        assert result.errors == []
        assert result.success_count == len(before)
        assert projector.bulk_rows(db) == before
        assert get_project(db, "Payments, Core").description == 'Says "hi"'
        assert count(db, Project) == 2

    def test_xlsx_round_trip(self, db, service):
        self._seed(db, service)
        projector = ExportProjector()
        before = projector.bulk_rows(db)
        exported = write_xlsx(BULK_IMPORT_COLUMNS, before, "Data")

        result = service.import_file(db, io.BytesIO(exported), "export.xlsx")

        assert result.failed_count == 0
        assert result.success_count == len(before)
        assert projector.bulk_rows(db) == before
