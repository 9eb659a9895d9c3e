# backend/app/schemas/imports.py
"""
Pydantic schemas for import and export endpoints.

These schemas define the API response format for the bulk and module
import endpoints.
"""

from pydantic import BaseModel, Field


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ImportResultResponse(BaseModel):
    """
    Response schema for import operations.

    Rows that failed do not make the request fail: the counters and the
    line-numbered diagnostics describe what happened to each row.
    """

    success_count: int = Field(
        ...,
        description="Rows that were fully reconciled"
    )
    failed_count: int = Field(
        ...,
        description="Failures recorded across all phases"
    )
    total_count: int = Field(
        ...,
        description="success_count + failed_count"
    )
    errors: list[str] = Field(
        default_factory=list,
        description="Diagnostics formatted as 'line <n>: <message>' (line 0 for file-level errors)"
    )


class SupportedFormatsResponse(BaseModel):
    """
    Response schema listing supported file formats.
    """

    extensions: list[str] = Field(
        ...,
        description="Supported file extensions (e.g., ['.csv', '.xlsx'])"
    )
    content_types: list[str] = Field(
        ...,
        description="Supported MIME types"
    )
    columns: list[str] = Field(
        ...,
        description="Expected column order of the import layout"
    )
