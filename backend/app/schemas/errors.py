# backend/app/schemas/errors.py
"""
Error bodies returned outside the import result shape.

Row and file problems inside an upload are reported through
ImportResultResponse. These models cover the rest: unknown projects on
export, oversized uploads, rate limiting and malformed requests.
"""

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Body of every non-2xx response raised by a service or HTTP error."""

    error: str = Field(
        ...,
        description="Exception or HTTP error name (e.g., 'ProjectNotFoundError')"
    )
    message: str
    details: dict | None = Field(
        default=None,
        description="Identifiers of the missing resource, when known"
    )


class RequestFieldError(BaseModel):
    """One rejected request parameter (path id, missing upload field)."""

    field: str = Field(..., description="Dotted location, e.g. 'path.project_id'")
    message: str
    type: str


class RequestValidationDetail(BaseModel):
    """Body of a 422 response for a malformed request."""

    error: str = "ValidationError"
    message: str = "Request validation failed"
    details: list[RequestFieldError]
