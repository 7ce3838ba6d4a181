"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the AI provider clients
and the command-line scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()

_SETTINGS_CONFIG = SettingsConfigDict(extra="ignore")


class SupabaseSettings(BaseSettings):
    """Configuration for the hosted auth and storage provider."""

    model_config = _SETTINGS_CONFIG

    url: str = Field(..., validation_alias="SUPABASE_URL")
    anon_key: str = Field(..., validation_alias="SUPABASE_ANON_KEY")
    service_role_key: Optional[str] = Field(
        None,
        validation_alias="SUPABASE_SERVICE_ROLE_KEY",
        description="Elevated key used for table access and admin user cleanup.",
    )
    timeout_seconds: float = Field(30.0, validation_alias="SUPABASE_TIMEOUT_SECONDS")

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class GeminiSettings(BaseSettings):
    """Configuration for Gemini model access."""

    model_config = _SETTINGS_CONFIG

    api_key: Optional[str] = Field(None, validation_alias="GEMINI_API_KEY")
    model_name: str = Field("gemini-2.0-flash-exp", validation_alias="GEMINI_MODEL_NAME")
    temperature: float = Field(0.7, validation_alias="GEMINI_TEMPERATURE")
    max_output_tokens: int = Field(8192, validation_alias="GEMINI_MAX_OUTPUT_TOKENS")


class DeepSeekSettings(BaseSettings):
    """Configuration for the DeepSeek chat completions API."""

    model_config = _SETTINGS_CONFIG

    api_key: Optional[str] = Field(None, validation_alias="DEEPSEEK_API_KEY")
    base_url: str = Field(
        "https://api.deepseek.com/v1", validation_alias="DEEPSEEK_BASE_URL"
    )
    model_name: str = Field("deepseek-chat", validation_alias="DEEPSEEK_MODEL_NAME")
    timeout_seconds: float = Field(60.0, validation_alias="DEEPSEEK_TIMEOUT_SECONDS")
    temperature: float = Field(0.7, validation_alias="DEEPSEEK_TEMPERATURE")
    max_tokens: int = Field(8192, validation_alias="DEEPSEEK_MAX_TOKENS")


class AIProviderSettings(BaseSettings):
    """Selects which generative provider serves market analyses."""

    model_config = _SETTINGS_CONFIG

    provider: str = Field(
        "gemini",
        validation_alias="AI_PROVIDER",
        description="One of 'gemini', 'deepseek' or 'both'.",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return (value or "gemini").strip().lower()


class WebSearchSettings(BaseSettings):
    """Settings for the scraped web research step."""

    model_config = _SETTINGS_CONFIG

    enabled: bool = Field(True, validation_alias="WEB_SEARCH_ENABLED")
    delay_seconds: float = Field(
        1.0,
        validation_alias="WEB_SEARCH_DELAY_SECONDS",
        description="Pause between consecutive searches to avoid being throttled.",
    )
    timeout_seconds: float = Field(10.0, validation_alias="WEB_SEARCH_TIMEOUT_SECONDS")
    results_per_query: int = Field(3, validation_alias="WEB_SEARCH_RESULTS_PER_QUERY")


class RateLimitSettings(BaseSettings):
    """Per-IP request budgets applied to the API routes."""

    model_config = _SETTINGS_CONFIG

    enabled: bool = Field(True, validation_alias="RATE_LIMIT_ENABLED")
    window_ms: int = Field(15 * 60 * 1000, validation_alias="RATE_LIMIT_WINDOW_MS")
    max_requests: int = Field(100, validation_alias="RATE_LIMIT_MAX_REQUESTS")
    analysis_limit: str = Field("10/hour", validation_alias="ANALYSIS_RATE_LIMIT")

    @property
    def default_limit(self) -> str:
        """Render the general budget in the limits string notation."""
        window_seconds = max(1, self.window_ms // 1000)
        return f"{self.max_requests} per {window_seconds} seconds"


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field("production", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    cors_origins: str = Field(
        "*",
        validation_alias="CORS_ORIGINS",
        description="Either '*' or a comma-separated list of allowed origins.",
    )
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    deepseek: DeepSeekSettings = Field(default_factory=DeepSeekSettings)
    ai: AIProviderSettings = Field(default_factory=AIProviderSettings)
    web_search: WebSearchSettings = Field(default_factory=WebSearchSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def allowed_origins(self) -> list[str]:
        """Expand ``cors_origins`` into the list CORSMiddleware expects."""
        raw = self.cors_origins.strip()
        if raw == "*":
            return ["*"]
        return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AIProviderSettings",
    "AppSettings",
    "DeepSeekSettings",
    "GeminiSettings",
    "RateLimitSettings",
    "SupabaseSettings",
    "WebSearchSettings",
    "get_settings",
]
