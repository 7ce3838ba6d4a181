"""
Market analysis routes. Every lookup is scoped to the authenticated user.
"""

import logging
from http import HTTPStatus
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from arq6.api.errors import ApiError
from arq6.dependencies import (
    CurrentUser,
    get_ai_service,
    get_analysis_store,
    get_market_analysis_service,
)
from arq6.middleware.rate_limit import analysis_limit, limiter
from arq6.models import AnalysisRecord
from arq6.schemas import MarketAnalysisRequest, Pagination
from arq6.services import AIService, AnalysisStore, MarketAnalysisService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])

Store = Annotated[AnalysisStore, Depends(get_analysis_store)]
PageQuery = Annotated[int, Query(ge=1, description="1-based page number.")]
LimitQuery = Annotated[int, Query(ge=1, le=100, description="Items per page.")]

_NOT_FOUND_MESSAGE = "A análise solicitada não existe ou não pertence a você"


def _listing(records: list[AnalysisRecord], pagination: Pagination) -> dict:
    return {
        "success": True,
        "data": {
            "analyses": [record.to_response() for record in records],
            "pagination": pagination.model_dump(),
        },
    }


@router.post("/market")
@limiter.limit(analysis_limit)
async def create_market_analysis(
    request: Request,
    payload: MarketAnalysisRequest,
    current_user: CurrentUser,
    service: Annotated[MarketAnalysisService, Depends(get_market_analysis_service)],
) -> dict:
    """Research the segment, generate the report and store it for the caller."""
    if str(payload.usuario_id) != current_user.id:
        logger.warning(
            "usuario_id %s does not match token user %s; storing under token user.",
            payload.usuario_id,
            current_user.id,
        )
    logger.info("Starting market analysis for segment '%s'.", payload.segmento)
    outcome = await service.analyze(
        user_id=current_user.id,
        segmento=payload.segmento,
        contexto_adicional=payload.contexto_adicional,
    )
    return {
        "success": True,
        "data": outcome.to_response(),
        "message": "Análise de mercado concluída com sucesso",
    }


@router.get("/history")
async def list_history(
    current_user: CurrentUser,
    store: Store,
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> dict:
    records, pagination = await store.list_for_user(current_user.id, page=page, limit=limit)
    return _listing(records, pagination)


@router.get("/search")
async def search_history(
    current_user: CurrentUser,
    store: Store,
    segmento: Annotated[str, Query(min_length=1, max_length=100)],
    page: PageQuery = 1,
    limit: LimitQuery = 10,
) -> dict:
    records, pagination = await store.search_by_segment(
        current_user.id, segmento, page=page, limit=limit
    )
    return _listing(records, pagination)


@router.get("/providers")
async def provider_info(
    current_user: CurrentUser,
    ai_service: Annotated[AIService, Depends(get_ai_service)],
) -> dict:
    return {"success": True, "data": ai_service.provider_info()}


@router.get("/stats/overview")
async def stats_overview(current_user: CurrentUser, store: Store) -> dict:
    stats = await store.stats_for_user(current_user.id)
    return {"success": True, "data": stats}


@router.get("/{analysis_id}")
async def get_analysis(analysis_id: UUID, current_user: CurrentUser, store: Store) -> dict:
    record = await store.find_for_user(str(analysis_id), current_user.id)
    if record is None:
        raise ApiError(HTTPStatus.NOT_FOUND, "Análise não encontrada", _NOT_FOUND_MESSAGE)
    return {"success": True, "data": record.to_response()}


@router.delete("/{analysis_id}")
async def delete_analysis(
    analysis_id: UUID, current_user: CurrentUser, store: Store
) -> dict:
    deleted = await store.delete_for_user(str(analysis_id), current_user.id)
    if not deleted:
        raise ApiError(HTTPStatus.NOT_FOUND, "Análise não encontrada", _NOT_FOUND_MESSAGE)
    logger.info("Analysis %s deleted by user %s.", analysis_id, current_user.id)
    return {"success": True, "message": "Análise deletada com sucesso"}


__all__ = ["router"]
