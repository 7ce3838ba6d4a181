"""Provider selection with a single cross-provider fallback."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from arq6.services.ai_providers import (
    AIProviderError,
    AnalysisProvider,
    AnalysisResult,
)
from arq6.services.market_research import ResearchContext

logger = logging.getLogger(__name__)

GEMINI = "gemini"
DEEPSEEK = "deepseek"
BOTH = "both"
AVAILABLE_PROVIDERS: tuple[str, ...] = (GEMINI, DEEPSEEK, BOTH)

_FALLBACKS = {GEMINI: DEEPSEEK, DEEPSEEK: GEMINI}


class AIService:
    """Route analysis requests to Gemini, DeepSeek or both.

    A failing single provider is retried once on the other provider. In
    ``both`` mode the two calls run concurrently and DeepSeek's text wins
    when both succeed.
    """

    def __init__(
        self,
        providers: Mapping[str, AnalysisProvider],
        *,
        provider: str = GEMINI,
    ) -> None:
        self._providers = dict(providers)
        if provider not in AVAILABLE_PROVIDERS:
            logger.warning("Invalid AI provider '%s'; defaulting to Gemini.", provider)
            provider = GEMINI
        self._provider = provider

    @property
    def provider(self) -> str:
        return self._provider

    def set_provider(self, provider: str) -> bool:
        if provider not in AVAILABLE_PROVIDERS:
            logger.error("Invalid AI provider '%s'.", provider)
            return False
        self._provider = provider
        logger.info("AI provider switched to '%s'.", provider)
        return True

    def provider_info(self) -> Dict[str, Any]:
        return {
            "current": self._provider,
            "available": list(AVAILABLE_PROVIDERS),
            "hasGeminiKey": self._providers[GEMINI].configured,
            "hasDeepSeekKey": self._providers[DEEPSEEK].configured,
        }

    async def test_connections(self) -> Dict[str, bool]:
        results: Dict[str, bool] = {}
        for name in (GEMINI, DEEPSEEK):
            try:
                results[name] = await self._providers[name].test_connection()
            except Exception as exc:  # pylint: disable=broad-except
                logger.error("Connection test for %s failed: %s", name, exc)
                results[name] = False
        return results

    async def analyze_market(self, context: ResearchContext) -> AnalysisResult:
        logger.info("Using AI provider '%s'.", self._provider)
        if self._provider == BOTH:
            return await self._analyze_with_both(context)

        try:
            return await self._providers[self._provider].analyze(context)
        except Exception as exc:
            fallback = _FALLBACKS[self._provider]
            logger.warning(
                "Provider '%s' failed (%s); falling back to '%s'.",
                self._provider,
                exc,
                fallback,
            )
            try:
                return await self._providers[fallback].analyze(context)
            except Exception as fallback_exc:  # pylint: disable=broad-except
                logger.error("Fallback provider '%s' failed: %s", fallback, fallback_exc)
            raise

    async def _analyze_with_both(self, context: ResearchContext) -> AnalysisResult:
        gemini_outcome, deepseek_outcome = await asyncio.gather(
            self._providers[GEMINI].analyze(context),
            self._providers[DEEPSEEK].analyze(context),
            return_exceptions=True,
        )
        outcomes = {GEMINI: gemini_outcome, DEEPSEEK: deepseek_outcome}

        succeeded = [
            name for name, outcome in outcomes.items()
            if isinstance(outcome, AnalysisResult)
        ]
        provider_results: Dict[str, Dict[str, Any]] = {}
        for name, outcome in outcomes.items():
            if isinstance(outcome, AnalysisResult):
                provider_results[name] = {"model": outcome.metadata.get("model")}
            else:
                logger.error("Provider '%s' failed in combined mode: %s", name, outcome)
                provider_results[name] = {"error": str(outcome)}

        if not succeeded:
            raise AIProviderError("Ambos os provedores AI falharam")

        primary = DEEPSEEK if DEEPSEEK in succeeded else GEMINI
        chosen: AnalysisResult = outcomes[primary]  # type: ignore[assignment]
        metadata = {
            **chosen.metadata,
            "providers": succeeded,
            "primaryProvider": primary,
            "providerResults": provider_results,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
            "segmento": context.segmento,
        }
        return AnalysisResult(analysis=chosen.analysis, metadata=metadata)


__all__ = ["AIService", "AVAILABLE_PROVIDERS", "BOTH", "DEEPSEEK", "GEMINI"]
