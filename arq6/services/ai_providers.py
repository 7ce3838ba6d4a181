"""Adapters turning a research context into analysis text with each vendor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Protocol

from arq6.clients.deepseek import DeepSeekAPIError, DeepSeekClient
from arq6.clients.gemini import GeminiClient, GeminiModelError
from arq6.services.market_research import ResearchContext
from arq6.services.prompts import build_chat_messages, build_single_prompt

logger = logging.getLogger(__name__)


class AIProviderError(RuntimeError):
    """Raised when a provider cannot produce an analysis."""


class ProviderUnavailableError(AIProviderError):
    """Raised when a provider is selected but has no credentials."""


@dataclass(slots=True)
class AnalysisResult:
    """Generated analysis text plus the metadata persisted alongside it."""

    analysis: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class AnalysisProvider(Protocol):
    name: str

    @property
    def configured(self) -> bool: ...

    async def analyze(self, context: ResearchContext) -> AnalysisResult: ...

    async def test_connection(self) -> bool: ...


def _build_metadata(context: ResearchContext, *, model: str, provider: str) -> Dict[str, Any]:
    return {
        "segmento": context.segmento,
        "webResultsCount": len(context.web_results),
        "trendData": context.trend_data,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "model": model,
        "provider": provider,
    }


class GeminiAnalysisProvider:
    """Generate analyses with Gemini using a single-turn prompt."""

    name = "gemini"

    def __init__(self, client: GeminiClient | None) -> None:
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def analyze(self, context: ResearchContext) -> AnalysisResult:
        if self._client is None:
            raise ProviderUnavailableError("GEMINI_API_KEY não configurada")
        logger.info("Generating analysis with Gemini for '%s'.", context.segmento)
        try:
            reply = await self._client.generate(build_single_prompt(context))
        except (GeminiModelError, ValueError) as exc:
            raise AIProviderError(f"Falha na análise: {exc}") from exc
        if not reply.text.strip():
            raise AIProviderError("Falha na análise: Gemini retornou uma resposta vazia")
        return AnalysisResult(
            analysis=reply.text,
            metadata=_build_metadata(
                context, model=reply.model_name, provider=self.name
            ),
        )

    async def test_connection(self) -> bool:
        # No cheap probe endpoint; a configured key is treated as reachable.
        return self.configured


class DeepSeekAnalysisProvider:
    """Generate analyses with DeepSeek using system and user chat messages."""

    name = "deepseek"

    def __init__(self, client: DeepSeekClient | None) -> None:
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def analyze(self, context: ResearchContext) -> AnalysisResult:
        if self._client is None:
            raise ProviderUnavailableError("DEEPSEEK_API_KEY não configurada")
        logger.info("Generating analysis with DeepSeek for '%s'.", context.segmento)
        try:
            text = await self._client.chat(build_chat_messages(context))
        except DeepSeekAPIError as exc:
            raise AIProviderError(f"Falha na análise: {exc}") from exc
        if not text.strip():
            raise AIProviderError("Falha na análise: DeepSeek retornou uma resposta vazia")
        return AnalysisResult(
            analysis=text,
            metadata=_build_metadata(
                context, model=self._client.model_name, provider=self.name
            ),
        )

    async def test_connection(self) -> bool:
        if self._client is None:
            return False
        return await self._client.test_connection()


__all__ = [
    "AIProviderError",
    "AnalysisProvider",
    "AnalysisResult",
    "DeepSeekAnalysisProvider",
    "GeminiAnalysisProvider",
    "ProviderUnavailableError",
]
