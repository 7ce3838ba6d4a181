"""
FastAPI application entrypoint for the market analysis API.
"""

from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from arq6.api.errors import register_exception_handlers
from arq6.api.routes import API_VERSION
from arq6.api.routes import router as api_router
from arq6.api.routes import system_router
from arq6.core.config import get_settings
from arq6.core.logging import configure_logging
from arq6.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    enforce_default_limit,
    limiter,
)


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="ARQ6 Market Analysis API",
        version=API_VERSION,
        description="REST API for accounts and AI-generated market analyses.",
    )

    limiter.enabled = settings.rate_limit.enabled
    app.state.limiter = limiter

    # Last added runs first: logging wraps everything else.
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)
    origins = settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app, settings)
    app.include_router(system_router)
    app.include_router(
        api_router, prefix="/api", dependencies=[Depends(enforce_default_limit)]
    )
    return app


app = create_app()

__all__ = ["app", "create_app"]
