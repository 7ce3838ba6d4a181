"""Client wrapper for interacting with Google Gemini models."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPICallError, NotFound

from arq6.core.config import GeminiSettings


_TEXT_FALLBACKS: tuple[str, ...] = (
    "gemini-2.0-flash",
    "gemini-1.5-pro",
    "gemini-1.5-flash",
)

logger = logging.getLogger(__name__)


class GeminiModelError(RuntimeError):
    """Raised when Gemini cannot fulfill a request."""


@dataclass(frozen=True, slots=True)
class GeminiReply:
    """Generated text and the model that actually produced it."""

    text: str
    model_name: str


class GeminiClient:
    """Generate long-form market analysis text with Gemini."""

    def __init__(self, settings: GeminiSettings) -> None:
        if not settings.api_key:
            raise GeminiModelError("GEMINI_API_KEY is not configured.")
        self._settings = settings
        # Configure the global client once per process.
        genai.configure(api_key=settings.api_key)

    async def generate(self, prompt: str) -> GeminiReply:
        """Produce a free-form text response, falling back across models."""

        def _invoke() -> GeminiReply:
            model_name, response = self._invoke_with_models(
                models=self._text_model_candidates(),
                error_prefix="Gemini text generate_content failed",
                call=lambda model: model.generate_content(prompt),
            )
            return GeminiReply(text=response.text or "", model_name=model_name)

        return await asyncio.to_thread(_invoke)

    def _generation_config(self) -> genai.GenerationConfig:
        return genai.GenerationConfig(
            temperature=self._settings.temperature,
            top_k=40,
            top_p=0.95,
            max_output_tokens=self._settings.max_output_tokens,
        )

    def _invoke_with_models(
        self,
        *,
        models: Iterable[str],
        error_prefix: str,
        call: Callable[[genai.GenerativeModel], Any],
    ) -> tuple[str, Any]:
        """Try the configured model then the fallbacks; return the answering model."""

        model_sequence = list(models)
        last_not_found: NotFound | None = None
        for index, model_name in enumerate(model_sequence):
            generative_model = genai.GenerativeModel(
                model_name, generation_config=self._generation_config()
            )
            try:
                return model_name, call(generative_model)
            except NotFound as exc:  # pragma: no cover - network call
                last_not_found = exc
                logger.warning(
                    "Gemini model '%s' not found (attempt %d/%d); trying fallback.",
                    model_name,
                    index + 1,
                    len(model_sequence),
                )
                continue
            except GoogleAPICallError as exc:  # pragma: no cover - network call
                raise GeminiModelError(f"{error_prefix}: {exc.message}") from exc

        if last_not_found is not None:
            primary = model_sequence[0] if model_sequence else "unknown"
            raise GeminiModelError(
                "Gemini model '"
                f"{primary}"
                "' is not available. Update GEMINI_MODEL_NAME to a supported value."
            ) from last_not_found

        raise GeminiModelError(f"{error_prefix}: Unknown error invoking Gemini.")

    def _text_model_candidates(self) -> list[str]:
        return self._collect_candidates(self._settings.model_name, _TEXT_FALLBACKS)

    @staticmethod
    def _collect_candidates(
        configured: str | None,
        fallbacks: tuple[str, ...],
    ) -> list[str]:
        """Return distinct model names prioritizing the configured value."""
        seen: set[str] = set()
        candidates: list[str] = []
        for name in (configured, *fallbacks):
            if not name:
                continue
            cleaned = name.strip()
            if not cleaned or cleaned in seen:
                continue
            seen.add(cleaned)
            candidates.append(cleaned)
        return candidates


__all__ = ["GeminiClient", "GeminiModelError", "GeminiReply"]
