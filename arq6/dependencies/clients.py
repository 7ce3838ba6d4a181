"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

import logging
from functools import lru_cache

from arq6.clients import (
    DeepSeekClient,
    GeminiClient,
    SupabaseAuthClient,
    SupabaseTableClient,
    WebSearchClient,
)
from arq6.core.config import get_settings
from arq6.services import (
    AIService,
    AnalysisStore,
    DeepSeekAnalysisProvider,
    GeminiAnalysisProvider,
    MarketAnalysisService,
    MarketResearchService,
    UserAccountService,
    UserStore,
)
from arq6.services.ai_service import DEEPSEEK, GEMINI

logger = logging.getLogger(__name__)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_supabase_auth_client() -> SupabaseAuthClient:
    """Provide the GoTrue client used for sign-up, login and token checks."""
    return SupabaseAuthClient(_settings().supabase)


@lru_cache()
def get_supabase_table_client() -> SupabaseTableClient:
    """Provide the PostgREST client used for profile and analysis rows."""
    return SupabaseTableClient(_settings().supabase)


@lru_cache()
def get_gemini_client() -> GeminiClient | None:
    """Provide Gemini client instance when an API key is configured."""
    settings = _settings()
    if not settings.gemini.api_key:
        logger.warning("GEMINI_API_KEY not set; Gemini provider disabled.")
        return None
    return GeminiClient(settings.gemini)


@lru_cache()
def get_deepseek_client() -> DeepSeekClient | None:
    """Provide DeepSeek client instance when an API key is configured."""
    settings = _settings()
    if not settings.deepseek.api_key:
        logger.warning("DEEPSEEK_API_KEY not set; DeepSeek provider disabled.")
        return None
    return DeepSeekClient(settings.deepseek)


@lru_cache()
def get_web_search_client() -> WebSearchClient | None:
    """Provide web search client unless research is switched off."""
    settings = _settings()
    if not settings.web_search.enabled:
        return None
    return WebSearchClient(timeout_seconds=settings.web_search.timeout_seconds)


def get_user_store() -> UserStore:
    return UserStore(get_supabase_table_client())


def get_analysis_store() -> AnalysisStore:
    return AnalysisStore(get_supabase_table_client())


def get_account_service() -> UserAccountService:
    """Build the account workflow around the identity provider and profiles."""
    return UserAccountService(
        auth_client=get_supabase_auth_client(),
        user_store=get_user_store(),
    )


def get_market_research_service() -> MarketResearchService:
    settings = _settings()
    return MarketResearchService(
        get_web_search_client(),
        delay_seconds=settings.web_search.delay_seconds,
        results_per_query=settings.web_search.results_per_query,
    )


@lru_cache()
def get_ai_service() -> AIService:
    """Provide the process-wide AI service so provider switches persist."""
    settings = _settings()
    return AIService(
        {
            GEMINI: GeminiAnalysisProvider(get_gemini_client()),
            DEEPSEEK: DeepSeekAnalysisProvider(get_deepseek_client()),
        },
        provider=settings.ai.provider,
    )


def get_market_analysis_service() -> MarketAnalysisService:
    """Build the market analysis pipeline from its collaborators."""
    return MarketAnalysisService(
        research=get_market_research_service(),
        ai_service=get_ai_service(),
        store=get_analysis_store(),
    )


__all__ = [
    "get_account_service",
    "get_ai_service",
    "get_analysis_store",
    "get_deepseek_client",
    "get_gemini_client",
    "get_market_analysis_service",
    "get_market_research_service",
    "get_supabase_auth_client",
    "get_supabase_table_client",
    "get_user_store",
    "get_web_search_client",
]
