# backend/app/utils/files.py
"""
Upload and download helpers shared by the import/export routers.

Usage:
    from app.utils.files import read_upload, attachment_response

    content = read_upload(file)            # raises on empty/unsupported/too large
    return attachment_response(payload, "export.csv", CSV_MEDIA_TYPE)
"""

import logging

from fastapi import HTTPException, UploadFile, status
from fastapi.responses import Response

from app.services.constants import MAX_UPLOAD_FILE_SIZE_BYTES
from app.services.exceptions import EmptyUploadError
from app.services.tabular import get_decoder

logger = logging.getLogger(__name__)


def read_upload(file: UploadFile) -> bytes:
    """
    Read an uploaded file after checking it can be imported at all.

    Args:
        file: Multipart upload

    Returns:
        The raw file content

    Raises:
        EmptyUploadError: The upload has no content
        UnsupportedFileTypeError: Neither CSV nor XLSX
        HTTPException: 413 if the file exceeds MAX_UPLOAD_FILE_SIZE_BYTES
    """
    content = file.file.read()
    file_size = len(content)

    if file_size == 0:
        raise EmptyUploadError(file.filename)

    if file_size > MAX_UPLOAD_FILE_SIZE_BYTES:
        max_mb = MAX_UPLOAD_FILE_SIZE_BYTES / (1024 * 1024)
        actual_mb = file_size / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large: {actual_mb:.1f}MB exceeds maximum of {max_mb:.0f}MB"
        )

    # Fail fast on the file kind, before any database work
    get_decoder(file.filename or "", file.content_type)

    logger.debug(f"Accepted upload {file.filename} ({file_size} bytes)")
    return content


def attachment_response(content: str | bytes, filename: str, media_type: str) -> Response:
    """Wrap an export payload as a file download."""
    body = content.encode("utf-8") if isinstance(content, str) else content
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
