"""Collect web snippets and keyword hints that enrich a market analysis prompt."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from arq6.clients.web_search import WebSearchClient

logger = logging.getLogger(__name__)

DEFAULT_SEGMENT = "mercado digital"


@dataclass(slots=True)
class ResearchContext:
    """Everything the prompt template interpolates for one analysis."""

    segmento: str
    contexto_adicional: Optional[str] = None
    web_results: List[Dict[str, Any]] = field(default_factory=list)
    trend_data: Optional[Dict[str, Any]] = None
    analysis_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def build_search_queries(segmento: str, *, year: int) -> List[str]:
    return [
        f"{segmento} mercado brasileiro {year}",
        f"{segmento} tendências consumidor",
        f"{segmento} concorrentes principais",
        f"{segmento} preços mercado",
        f"{segmento} público alvo perfil",
    ]


def build_trend_data(segmento: str, *, year: int) -> Dict[str, Any]:
    """Keyword variations worth checking in keyword-planning tools."""
    return {
        "keyword": segmento,
        "relatedKeywords": [
            f"{segmento} {year}",
            f"como {segmento}",
            f"{segmento} online",
            f"melhor {segmento}",
            f"{segmento} gratis",
        ],
    }


class MarketResearchService:
    """Run the sequential web searches that back an analysis."""

    def __init__(
        self,
        search_client: WebSearchClient | None,
        *,
        delay_seconds: float = 1.0,
        results_per_query: int = 3,
    ) -> None:
        self._search = search_client
        self._delay = delay_seconds
        self._results_per_query = results_per_query

    async def gather(
        self, segmento: str, contexto_adicional: Optional[str] = None
    ) -> ResearchContext:
        segmento = segmento or DEFAULT_SEGMENT
        now = datetime.now(timezone.utc)
        context = ResearchContext(
            segmento=segmento,
            contexto_adicional=contexto_adicional,
            trend_data=build_trend_data(segmento, year=now.year),
            analysis_date=now,
        )
        if self._search is None:
            logger.info("Web search disabled; analysing '%s' without research.", segmento)
            return context

        queries = build_search_queries(segmento, year=now.year)
        for index, query in enumerate(queries):
            results = await self._search.search(query, num_results=self._results_per_query)
            context.web_results.extend(results)
            if self._delay and index < len(queries) - 1:
                await asyncio.sleep(self._delay)

        logger.info(
            "Collected %d web results for segment '%s'.",
            len(context.web_results),
            segmento,
        )
        return context


__all__ = [
    "DEFAULT_SEGMENT",
    "MarketResearchService",
    "ResearchContext",
    "build_search_queries",
    "build_trend_data",
]
