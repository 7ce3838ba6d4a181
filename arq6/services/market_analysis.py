"""Orchestrate research, generation and persistence of one market analysis."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from arq6.clients.supabase import SupabaseError
from arq6.services.ai_service import AIService
from arq6.services.analysis_store import AnalysisStore
from arq6.services.market_research import MarketResearchService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MarketAnalysisOutcome:
    id: Optional[str]
    segmento: str
    analysis: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_response(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "segmento": self.segmento,
            "analysis": self.analysis,
            "metadata": self.metadata,
        }


class MarketAnalysisService:
    """Run the research, AI and storage steps behind ``POST /analysis/market``.

    Provider failures propagate to the caller. A failed insert is logged
    and reported through ``metadata.savedToDatabase`` instead.
    """

    def __init__(
        self,
        *,
        research: MarketResearchService,
        ai_service: AIService,
        store: AnalysisStore,
    ) -> None:
        self._research = research
        self._ai = ai_service
        self._store = store

    async def analyze(
        self,
        *,
        user_id: str,
        segmento: str,
        contexto_adicional: Optional[str] = None,
    ) -> MarketAnalysisOutcome:
        started = time.perf_counter()
        context = await self._research.gather(segmento, contexto_adicional)
        result = await self._ai.analyze_market(context)
        processing_ms = int((time.perf_counter() - started) * 1000)

        metadata = {**result.metadata, "processingTimeMs": processing_ms}
        analysis_id: Optional[str] = None
        try:
            record = await self._store.create(
                user_id=user_id,
                segmento=segmento,
                resultado=result.analysis,
                contexto_adicional=contexto_adicional,
                metadata=metadata,
            )
            analysis_id = record.id
        except SupabaseError:
            logger.exception("Failed to save analysis for user %s", user_id)

        logger.info(
            "Analysis for '%s' finished in %d ms (saved=%s).",
            segmento,
            processing_ms,
            analysis_id is not None,
        )
        return MarketAnalysisOutcome(
            id=analysis_id,
            segmento=segmento,
            analysis=result.analysis,
            metadata={**metadata, "savedToDatabase": analysis_id is not None},
        )


__all__ = ["MarketAnalysisOutcome", "MarketAnalysisService"]
