# backend/app/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

An upload is reconciled synchronously inside its request, so every log
line of a batch (decoding, each phase, each rejected row) shares the
request's correlation ID. Clients can pass their own ID to find those
lines later.

Correlation ID Sources (in order of precedence):
1. X-Correlation-ID header
2. X-Request-ID header
3. Generated UUID

Client Usage:
    curl -H "X-Correlation-ID: import-2024-01" \\
         -F "file=@interns.csv" http://localhost:8000/bulk-import/upload

    # Response header: X-Correlation-ID: import-2024-01
"""

import logging
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.utils.context import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Sets a correlation ID for each request and echoes it in the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        correlation_id = self._get_correlation_id(request)
        set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()

    @staticmethod
    def _get_correlation_id(request: Request) -> str:
        """First non-empty tracing header, else a fresh UUID4."""
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header)
            if value:
                return value
        return str(uuid.uuid4())
