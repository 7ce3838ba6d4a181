"""Expose constructed client wrappers."""

from .deepseek import DeepSeekAPIError, DeepSeekClient
from .gemini import GeminiClient, GeminiModelError, GeminiReply
from .supabase import (
    QueryResult,
    SupabaseAuthClient,
    SupabaseAuthError,
    SupabaseError,
    SupabaseTableClient,
)
from .web_search import WebSearchClient

__all__ = [
    "DeepSeekAPIError",
    "DeepSeekClient",
    "GeminiClient",
    "GeminiModelError",
    "GeminiReply",
    "QueryResult",
    "SupabaseAuthClient",
    "SupabaseAuthError",
    "SupabaseError",
    "SupabaseTableClient",
    "WebSearchClient",
]
