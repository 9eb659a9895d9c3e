# backend/app/middleware/__init__.py
"""
Middleware components for the Intern Data Reconciliation Service.

This package contains ASGI middleware for:
- Correlation ID tracking for request tracing
- Rate limiting for the upload and export endpoints

Usage:
    from app.middleware import CorrelationIdMiddleware, limiter

    app.add_middleware(CorrelationIdMiddleware)
    app.state.limiter = limiter
"""

from app.middleware.correlation import CorrelationIdMiddleware
from app.middleware.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_EXPORT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_UPLOAD,
)

__all__ = [
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_EXPORT",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_UPLOAD",
]
