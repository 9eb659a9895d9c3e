# backend/tests/routers/test_bulk_import_api.py
"""
API layer tests for the bulk import endpoints.

Tests:
- GET /bulk-import/formats - Supported file kinds and column order
- POST /bulk-import/upload - Upload interns, teams and projects
- GET /bulk-import/export - CSV download
- GET /bulk-import/export/excel - XLSX download

Uploads run against the real services and the in-memory test database;
one test swaps the service for a mock to check the response mapping.
"""

import io
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from openpyxl import load_workbook
from sqlalchemy import select

from app.dependencies import get_bulk_import_service
from app.main import app
from app.models import Intern
from app.services.constants import BULK_IMPORT_COLUMNS, XLSX_MEDIA_TYPE
from app.services.reconciliation import ImportResult

from tests.conftest import bulk_row, csv_bytes, xlsx_bytes


def sample_rows() -> list[list[str]]:
    return [
        bulk_row(intern_code="P001", name="Alice", email="alice@example.com",
                 team_name="Backend", team_leader_intern_code="P001",
                 project_name="Payments, Core", project_status="IN_PROGRESS",
                 project_start_date="01/03/2024"),
        bulk_row(intern_code="P002", name="Bob", team_name="Backend",
                 project_name="Payments, Core"),
    ]


def upload(client, content: bytes, filename: str = "interns.csv", content_type: str = "text/csv"):
    return client.post(
        "/bulk-import/upload",
        files={"file": (filename, io.BytesIO(content), content_type)},
    )


# =============================================================================
# FORMATS
# =============================================================================

class TestFormats:

    def test_lists_extensions_and_columns(self, client):
        response = client.get("/bulk-import/formats")

        assert response.status_code == 200
        data = response.json()
        assert data["extensions"] == [".csv", ".xlsx"]
        assert data["columns"] == BULK_IMPORT_COLUMNS
        assert XLSX_MEDIA_TYPE in data["content_types"]


# =============================================================================
# UPLOAD
# =============================================================================

class TestUpload:

    def test_csv_upload(self, client, db):
        response = upload(client, csv_bytes(sample_rows()))

        assert response.status_code == 200
        assert response.json() == {
            "success_count": 2,
            "failed_count": 0,
            "total_count": 2,
            "errors": [],
        }
        assert db.scalar(select(Intern).where(Intern.intern_code == "P002")) is not None

    def test_xlsx_upload(self, client):
        response = upload(client, xlsx_bytes(sample_rows()), "interns.xlsx", XLSX_MEDIA_TYPE)

        assert response.status_code == 200
        assert response.json()["success_count"] == 2

    def test_row_failures_still_return_200(self, client):
        rows = sample_rows() + [bulk_row(intern_code="P999", team_name="Backend")]

        response = upload(client, csv_bytes(rows))

        assert response.status_code == 200
        data = response.json()
        assert data["success_count"] == 2
        assert data["failed_count"] == 1
        assert data["errors"] == ["line 4: Intern with code 'P999' not found"]

    def test_empty_upload_is_rejected(self, client):
        response = upload(client, b"")

        assert response.status_code == 400
        assert response.json() == {
            "success_count": 0,
            "failed_count": 0,
            "total_count": 0,
            "errors": ["line 0: No file uploaded"],
        }

    def test_unsupported_type_is_rejected(self, client, db):
        response = upload(client, b"some,text", "interns.txt", "text/plain")

        assert response.status_code == 400
        assert response.json()["errors"] == [
            "line 0: Only CSV and Excel (.xlsx) files are supported"
        ]
        assert db.scalars(select(Intern)).all() == []

    def test_too_large_upload(self, client):
        with patch("app.utils.files.MAX_UPLOAD_FILE_SIZE_BYTES", 10):
            response = upload(client, csv_bytes(sample_rows()))

        assert response.status_code == 413
        assert response.json()["error"] == "PayloadTooLargeError"

    def test_corrupt_workbook_reported_in_body(self, client):
        response = upload(client, b"garbage", "interns.xlsx", XLSX_MEDIA_TYPE)

        assert response.status_code == 200
        errors = response.json()["errors"]
        assert errors[0].startswith("line 0: File processing error:")

    def test_missing_file_field(self, client):
        response = client.post("/bulk-import/upload")

        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"

    def test_result_mapping_with_mock_service(self, client):
        service = MagicMock()
        result = ImportResult(success_count=3)
        result.add_failure(5, "Required fields missing")
        service.import_file.return_value = result
        app.dependency_overrides[get_bulk_import_service] = lambda: service

        response = upload(client, b"header\nrow\n", "data.csv")

        assert response.json() == {
            "success_count": 3,
            "failed_count": 1,
            "total_count": 4,
            "errors": ["line 5: Required fields missing"],
        }
        call = service.import_file.call_args.kwargs
        assert call["filename"] == "data.csv"
        assert call["content_type"] == "text/csv"


# =============================================================================
# EXPORT
# =============================================================================

class TestExport:

    @pytest.fixture(autouse=True)
    def seeded(self, client):
        assert upload(client, csv_bytes(sample_rows())).status_code == 200

    def test_csv_export(self, client):
        response = client.get("/bulk-import/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        expected_name = f"intern-data-export-{date.today().isoformat()}.csv"
        assert response.headers["content-disposition"] == f'attachment; filename="{expected_name}"'

        lines = response.text.splitlines()
        assert lines[0] == ",".join(BULK_IMPORT_COLUMNS)
        assert len(lines) == 3
        assert '"Payments, Core"' in lines[1]
        assert "01-03-2024" in lines[1]

    def test_excel_export(self, client):
        response = client.get("/bulk-import/export/excel")

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert response.headers["content-disposition"].endswith('.xlsx"')

        ws = load_workbook(io.BytesIO(response.content)).active
        assert ws.title == "Data"
        assert ws.max_row == 3
        assert ws["I2"].value == "Payments, Core"

    def test_export_reuploads_cleanly(self, client):
        exported = client.get("/bulk-import/export").content

        response = upload(client, exported, "export.csv")

        assert response.json()["errors"] == []
        assert response.json()["success_count"] == 2
