"""Pytest configuration shared across the suite."""

import pytest


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def tight_rate_limits(monkeypatch):
    """Shrink the request budgets to two general and one analysis request."""
    from arq6.core.config import RateLimitSettings, get_settings
    from arq6.middleware import limiter, rate_limit

    settings = get_settings().model_copy(
        update={
            "rate_limit": RateLimitSettings(
                RATE_LIMIT_MAX_REQUESTS=2,
                ANALYSIS_RATE_LIMIT="1/hour",
            )
        }
    )
    monkeypatch.setattr(rate_limit, "get_settings", lambda: settings)
    limiter.reset()
    yield settings
    limiter.reset()
