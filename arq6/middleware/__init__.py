"""Starlette middleware and the shared rate limiter."""

from .rate_limit import enforce_default_limit, limiter
from .request_logging import RequestLoggingMiddleware
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "enforce_default_limit",
    "limiter",
]
