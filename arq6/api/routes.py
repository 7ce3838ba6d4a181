"""
FastAPI routers for the market analysis API.
"""

import time
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import APIRouter, Depends

from arq6.api import analysis, users
from arq6.dependencies import SettingsDependency
from arq6.middleware.rate_limit import enforce_default_limit

API_NAME = "ARQ6 API - Análise de Mercado com IA"
API_VERSION = "1.0.0"

_STARTED_AT = time.monotonic()

router = APIRouter()
router.include_router(users.router)
router.include_router(analysis.router)

system_router = APIRouter(tags=["system"])


@system_router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(settings: SettingsDependency) -> dict:
    """Liveness endpoint for monitoring; never rate limited."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "environment": settings.environment,
    }


@system_router.get(
    "/api",
    status_code=HTTPStatus.OK,
    dependencies=[Depends(enforce_default_limit)],
)
async def api_info() -> dict:
    return {
        "message": API_NAME,
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "analysis": "/api/analysis",
            "users": "/api/users",
        },
    }


__all__ = ["API_NAME", "API_VERSION", "router", "system_router"]
