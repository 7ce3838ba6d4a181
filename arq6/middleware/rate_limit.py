"""
Per-IP rate limiting using slowapi.

The general budget is enforced by ``enforce_default_limit``, attached as a
router dependency where the API routers are mounted. Routes with their own
budget use the decorator on top of it:

    from arq6.middleware.rate_limit import analysis_limit, limiter

    @router.post("/market")
    @limiter.limit(analysis_limit)
    async def create_market_analysis(request: Request, ...):
        ...
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from arq6.core.config import get_settings


def default_limit() -> str:
    """General budget for every API route, resolved from settings at request time."""
    return get_settings().rate_limit.default_limit


def analysis_limit() -> str:
    """Stricter budget for market analysis creation."""
    return get_settings().rate_limit.analysis_limit


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[default_limit],
    storage_uri="memory://",
    strategy="fixed-window",
)


async def enforce_default_limit(request: Request) -> None:
    """Count the request against the general budget, raising ``RateLimitExceeded``.

    slowapi's middleware cannot see routes mounted through ``include_router`` on
    current FastAPI releases, so the default limits are checked here instead.
    Counters are kept per client address and path.
    """
    limiter._check_request_limit(request, None, False)  # pylint: disable=protected-access


__all__ = ["analysis_limit", "default_limit", "enforce_default_limit", "limiter"]
