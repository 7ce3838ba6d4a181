"""Client for the DeepSeek chat completions API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx

from arq6.core.config import DeepSeekSettings

logger = logging.getLogger(__name__)


class DeepSeekAPIError(RuntimeError):
    """Raised when DeepSeek returns an error or cannot be reached."""


class DeepSeekClient:
    """Send chat messages to DeepSeek and return the assistant reply."""

    def __init__(
        self,
        settings: DeepSeekSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not settings.api_key:
            raise DeepSeekAPIError("DEEPSEEK_API_KEY is not configured.")
        self._settings = settings
        self._transport = transport

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        top_p: float = 0.95,
    ) -> str:
        """Return the content of the first completion choice."""
        body: Dict[str, Any] = {
            "model": self._settings.model_name,
            "messages": messages,
            "temperature": (
                self._settings.temperature if temperature is None else temperature
            ),
            "max_tokens": max_tokens or self._settings.max_tokens,
            "top_p": top_p,
            "frequency_penalty": 0,
            "presence_penalty": 0,
            "stream": False,
        }
        url = f"{self._settings.base_url.rstrip('/')}/chat/completions"
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    url,
                    headers={
                        "Authorization": f"Bearer {self._settings.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=body,
                )
        except httpx.HTTPError as exc:
            raise DeepSeekAPIError(f"Falha na API DeepSeek: {exc}") from exc

        if response.is_error:
            detail = _error_message(response)
            logger.error("DeepSeek API error %s: %s", response.status_code, detail)
            raise DeepSeekAPIError(f"Falha na API DeepSeek: {detail}")

        try:
            return response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise DeepSeekAPIError(
                "Falha na API DeepSeek: resposta sem conteúdo"
            ) from exc

    async def test_connection(self) -> bool:
        """Send a tiny prompt and report whether the API answered with OK."""
        try:
            reply = await self.chat(
                [
                    {
                        "role": "user",
                        "content": 'Teste de conexão. Responda apenas "OK".',
                    }
                ],
                max_tokens=10,
            )
        except DeepSeekAPIError as exc:
            logger.warning("DeepSeek connection test failed: %s", exc)
            return False
        return "OK" in reply


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.text or f"HTTP {response.status_code}"


__all__ = ["DeepSeekAPIError", "DeepSeekClient"]
