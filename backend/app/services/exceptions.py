# backend/app/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── NotFoundError
    │   └── ProjectNotFoundError
    ├── ImportFileError                (file-level, aborts the whole batch)
    │   ├── UnsupportedFileTypeError
    │   ├── EmptyUploadError
    │   └── TabularDecodeError
    └── ReconciliationError            (row-level, recorded and skipped)
        ├── RowRejectedError
        ├── DuplicateKeyError
        ├── DateParseError
        └── UnknownStatusError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Project", "Team")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class ProjectNotFoundError(NotFoundError):
    """
    Raised when a project referenced by id cannot be found.

    Attributes:
        project_id: ID of the project that was not found
    """

    def __init__(self, project_id: int) -> None:
        self.project_id = project_id
        super().__init__(
            f"Project not found with ID: {project_id}",
            resource_type="Project",
            resource_id=project_id,
        )


# =============================================================================
# FILE-LEVEL IMPORT ERRORS
# =============================================================================


class ImportFileError(ServiceError):
    """
    Base exception for problems with the uploaded file as a whole.

    Any of these aborts the batch before the first phase runs.
    """
    pass


class UnsupportedFileTypeError(ImportFileError):
    """
    Raised when no decoder is available for a file type.

    Attributes:
        filename: Name of the unsupported file
        extension: File extension
        supported: List of supported extensions
    """

    def __init__(
            self,
            filename: str,
            extension: str,
            supported: list[str],
    ) -> None:
        self.filename = filename
        self.extension = extension
        self.supported = supported
        super().__init__(
            f"Unsupported file type: '{extension}'. "
            f"Supported formats: {', '.join(supported)}"
        )


class EmptyUploadError(ImportFileError):
    """Raised when the uploaded file has no content at all."""

    def __init__(self, filename: str | None = None) -> None:
        self.filename = filename
        super().__init__("No file uploaded")


class TabularDecodeError(ImportFileError):
    """
    Raised when a file cannot be decoded into rows.

    Examples:
    - Corrupt or password-protected workbook
    - Workbook without worksheets
    - CSV with malformed quoting the reader rejects

    Attributes:
        filename: Name of the file that failed to decode
        reason: Underlying error description
    """

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Could not read '{filename}': {reason}")


# =============================================================================
# ROW-LEVEL RECONCILIATION ERRORS
# =============================================================================


class ReconciliationError(ServiceError):
    """
    Base exception for failures scoped to a single row.

    The reconcilers catch these per row, record a line-numbered diagnostic
    and continue with the next row.
    """
    pass


class RowRejectedError(ReconciliationError):
    """
    Raised when a row fails a validation rule.

    The message is reported verbatim (e.g. "Team 'Backend' not found").
    """
    pass


class DuplicateKeyError(ReconciliationError):
    """
    Raised when creating an entity collides with an existing business key.

    This is distinct from the normal update path: the lookup did not find
    the key but the insert hit a unique constraint, which means another
    writer created it in the meantime.

    Attributes:
        entity_type: Kind of entity being created (e.g. "Intern")
        key: The business key that collided
    """

    def __init__(self, entity_type: str, key: str) -> None:
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"{entity_type} '{key}' already exists")


class DateParseError(ReconciliationError):
    """
    Raised when a date cell matches none of the accepted formats.

    Attributes:
        value: The raw cell value
        supported: Human-readable list of accepted formats
    """

    def __init__(self, value: str, supported: list[str]) -> None:
        self.value = value
        self.supported = supported
        super().__init__(
            f"Unable to parse date: {value}. Supported formats: {', '.join(supported)}"
        )


class UnknownStatusError(ReconciliationError):
    """
    Raised for an unrecognised status value when strict status checking is on.

    Attributes:
        value: The raw status value
        allowed: Accepted status names
    """

    def __init__(self, value: str, allowed: list[str]) -> None:
        self.value = value
        self.allowed = allowed
        super().__init__(
            f"Unknown status '{value}'. Allowed values: {', '.join(allowed)}"
        )


__all__ = [
    # Base
    "ServiceError",
    # Validation
    # Not Found
    "NotFoundError",
    "ProjectNotFoundError",
    # File-level
    "ImportFileError",
    "UnsupportedFileTypeError",
    "EmptyUploadError",
    "TabularDecodeError",
    # Row-level
    "ReconciliationError",
    "RowRejectedError",
    "DuplicateKeyError",
    "DateParseError",
    "UnknownStatusError",
]
