# backend/app/middleware/rate_limit.py
"""
Rate limiting for the import and export endpoints.

Uploads run a full multi-phase reconciliation inside the request and
exports walk the whole entity graph, so both are throttled per client
with slowapi. Limits live in app/services/constants.py.

Key by: Client IP address (X-Forwarded-For only behind a trusted proxy)
Storage: In-memory (one counter set per process)

Usage:
    from app.middleware.rate_limit import limiter
    from app.services.constants import RATE_LIMIT_UPLOAD

    @router.post("/upload")
    @limiter.limit(RATE_LIMIT_UPLOAD)
    def upload(request: Request, ...):
        ...

Setting RATE_LIMIT_ENABLED=false turns every limit off (used by the tests).
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import settings
from app.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_EXPORT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_UPLOAD,
)

logger = logging.getLogger(__name__)

# Seconds a throttled client is told to wait
RETRY_AFTER_SECONDS = 60


def _is_trusted_proxy(request: Request) -> bool:
    """
    True if forwarded-for headers on this request may be believed.

    Either every proxy is trusted (TRUST_PROXY_HEADERS, for deployments
    behind a load balancer) or the immediate peer is listed in
    TRUSTED_PROXY_IPS.
    """
    if settings.trust_proxy_headers:
        return True
    return get_remote_address(request) in settings.trusted_proxy_ips


def _get_client_ip(request: Request) -> str:
    """
    Rate limit key: the originating client address.

    Forwarded headers are ignored unless they come from a trusted proxy,
    so a client cannot dodge its limit by sending its own X-Forwarded-For.
    """
    if _is_trusted_proxy(request):
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # First entry is the original client
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return get_remote_address(request)


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    429 response in the ErrorDetail shape, with a Retry-After header.
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(
        f"Rate limit exceeded for {_get_client_ip(request)} on {request.url.path}: {limit_info}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {
                "retry_after": RETRY_AFTER_SECONDS,
            },
        },
        headers={
            "Retry-After": str(RETRY_AFTER_SECONDS),
        },
    )


# =============================================================================
# EXPORTS
# =============================================================================

# Re-export constants for convenient imports
__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_EXPORT",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_UPLOAD",
]
