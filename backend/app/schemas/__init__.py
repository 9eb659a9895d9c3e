# backend/app/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

This package contains all Pydantic schemas organized by domain:
- errors: Error response formats
- imports: Import results and supported formats

Usage:
    from app.schemas import ImportResultResponse, SupportedFormatsResponse
    from app.schemas import ErrorDetail, RequestFieldError, RequestValidationDetail
"""

from app.schemas.errors import ErrorDetail, RequestFieldError, RequestValidationDetail
from app.schemas.imports import ImportResultResponse, SupportedFormatsResponse

__all__ = [
    # Errors
    "ErrorDetail",
    "RequestFieldError",
    "RequestValidationDetail",
    # Imports
    "ImportResultResponse",
    "SupportedFormatsResponse",
]
