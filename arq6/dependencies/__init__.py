"""Expose dependency helpers for FastAPI routers."""

from .auth import (
    AuthenticatedUser,
    CurrentUser,
    get_current_user,
    get_optional_token,
)
from .clients import (
    get_account_service,
    get_ai_service,
    get_analysis_store,
    get_deepseek_client,
    get_gemini_client,
    get_market_analysis_service,
    get_market_research_service,
    get_supabase_auth_client,
    get_supabase_table_client,
    get_user_store,
    get_web_search_client,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "AuthenticatedUser",
    "CurrentUser",
    "SettingsDependency",
    "get_account_service",
    "get_ai_service",
    "get_analysis_store",
    "get_app_settings",
    "get_current_user",
    "get_deepseek_client",
    "get_gemini_client",
    "get_market_analysis_service",
    "get_market_research_service",
    "get_optional_token",
    "get_supabase_auth_client",
    "get_supabase_table_client",
    "get_user_store",
    "get_web_search_client",
]
