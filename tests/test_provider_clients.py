try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json

import httpx
import pytest
from google.api_core.exceptions import NotFound

from arq6.clients import (
    DeepSeekAPIError,
    DeepSeekClient,
    GeminiClient,
    GeminiModelError,
    WebSearchClient,
)
from arq6.clients import gemini as gemini_module
from arq6.clients.web_search import parse_results
from arq6.core.config import DeepSeekSettings, GeminiSettings
from arq6.services import GeminiAnalysisProvider, ResearchContext

SEARCH_HTML = """
<html><body>
  <div class="result results_links">
    <h2 class="result__title"><a href="#">Mercado pet cresce 14%</a></h2>
    <a class="result__url" href="https://example.com/pet">example.com/pet</a>
    <a class="result__snippet">Setor movimentou R$ 68 bilhões em 2024.</a>
  </div>
  <div class="result">
    <h2 class="result__title">Sem snippet</h2>
  </div>
  <div class="result">
    <h2 class="result__title">Tendências pet</h2>
    <a class="result__snippet">Consumidor busca produtos premium.</a>
  </div>
</body></html>
"""


def _deepseek_settings(**overrides) -> DeepSeekSettings:
    values = {"DEEPSEEK_API_KEY": "ds-key", "DEEPSEEK_BASE_URL": "https://api.test/v1"}
    values.update(overrides)
    return DeepSeekSettings(**values)


def test_parse_results_extracts_complete_entries():
    results = parse_results(SEARCH_HTML, num_results=5)

    assert results == [
        {
            "title": "Mercado pet cresce 14%",
            "snippet": "Setor movimentou R$ 68 bilhões em 2024.",
            "url": "https://example.com/pet",
            "source": "web_search",
        },
        {
            "title": "Tendências pet",
            "snippet": "Consumidor busca produtos premium.",
            "url": "",
            "source": "web_search",
        },
    ]


def test_parse_results_respects_limit():
    assert len(parse_results(SEARCH_HTML, num_results=1)) == 1


@pytest.mark.asyncio
async def test_web_search_sends_query_and_parses_html():
    seen: list[httpx.Request] = []

    def responder(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=SEARCH_HTML)

    client = WebSearchClient(transport=httpx.MockTransport(responder))

    results = await client.search("pet shop mercado", num_results=3)

    assert len(results) == 2
    assert seen[0].url.params["q"] == "pet shop mercado"
    assert "Mozilla" in seen[0].headers["User-Agent"]


@pytest.mark.asyncio
async def test_web_search_failure_returns_empty_list():
    client = WebSearchClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(503))
    )

    assert await client.search("qualquer coisa") == []


def test_deepseek_requires_api_key():
    with pytest.raises(DeepSeekAPIError):
        DeepSeekClient(_deepseek_settings(DEEPSEEK_API_KEY=None))


@pytest.mark.asyncio
async def test_deepseek_chat_posts_completion_request():
    seen: list[httpx.Request] = []

    def responder(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"choices": [{"message": {"content": "Relatório completo"}}]}
        )

    client = DeepSeekClient(_deepseek_settings(), transport=httpx.MockTransport(responder))

    reply = await client.chat([{"role": "user", "content": "Olá"}])

    assert reply == "Relatório completo"
    request = seen[0]
    assert str(request.url) == "https://api.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer ds-key"
    body = json.loads(request.content)
    assert body["model"] == "deepseek-chat"
    assert body["messages"] == [{"role": "user", "content": "Olá"}]
    assert body["stream"] is False


@pytest.mark.asyncio
async def test_deepseek_error_status_raises():
    client = DeepSeekClient(
        _deepseek_settings(),
        transport=httpx.MockTransport(
            lambda request: httpx.Response(
                401, json={"error": {"message": "Authentication Fails"}}
            )
        ),
    )

    with pytest.raises(DeepSeekAPIError) as excinfo:
        await client.chat([{"role": "user", "content": "Olá"}])

    assert "Authentication Fails" in str(excinfo.value)


@pytest.mark.asyncio
async def test_deepseek_connection_probe():
    ok_client = DeepSeekClient(
        _deepseek_settings(),
        transport=httpx.MockTransport(
            lambda request: httpx.Response(
                200, json={"choices": [{"message": {"content": "OK"}}]}
            )
        ),
    )
    failing_client = DeepSeekClient(
        _deepseek_settings(),
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="down")),
    )

    assert await ok_client.test_connection() is True
    assert await failing_client.test_connection() is False


class FakeGenerativeModel:
    missing: set[str] = set()
    created: list[str] = []

    def __init__(self, model_name: str, generation_config=None) -> None:
        self.model_name = model_name
        self.generation_config = generation_config
        FakeGenerativeModel.created.append(model_name)

    def generate_content(self, prompt: str):
        if self.model_name in self.missing:
            raise NotFound(f"{self.model_name} not found")

        class _Response:
            text = f"{self.model_name}: {prompt}"

        return _Response()


@pytest.fixture()
def fake_genai(monkeypatch):
    FakeGenerativeModel.missing = set()
    FakeGenerativeModel.created = []
    monkeypatch.setattr(gemini_module.genai, "GenerativeModel", FakeGenerativeModel)
    monkeypatch.setattr(gemini_module.genai, "configure", lambda **_: None)
    return FakeGenerativeModel


def _gemini_settings(**overrides) -> GeminiSettings:
    values = {"GEMINI_API_KEY": "g-key", "GEMINI_MODEL_NAME": "gemini-2.0-flash-exp"}
    values.update(overrides)
    return GeminiSettings(**values)


def test_gemini_requires_api_key(fake_genai):
    with pytest.raises(GeminiModelError):
        GeminiClient(_gemini_settings(GEMINI_API_KEY=None))


@pytest.mark.asyncio
async def test_gemini_generate_uses_configured_model(fake_genai):
    client = GeminiClient(_gemini_settings())

    reply = await client.generate("analise")

    assert reply.text == "gemini-2.0-flash-exp: analise"
    assert reply.model_name == "gemini-2.0-flash-exp"
    assert fake_genai.created == ["gemini-2.0-flash-exp"]


@pytest.mark.asyncio
async def test_gemini_falls_back_when_model_missing(fake_genai):
    fake_genai.missing = {"gemini-2.0-flash-exp"}
    client = GeminiClient(_gemini_settings())

    reply = await client.generate("analise")

    assert reply.text == "gemini-2.0-flash: analise"
    assert reply.model_name == "gemini-2.0-flash"
    assert fake_genai.created == ["gemini-2.0-flash-exp", "gemini-2.0-flash"]


@pytest.mark.asyncio
async def test_gemini_reports_unavailable_model(fake_genai):
    fake_genai.missing = {
        "gemini-2.0-flash-exp",
        "gemini-2.0-flash",
        "gemini-1.5-pro",
        "gemini-1.5-flash",
    }
    client = GeminiClient(_gemini_settings())

    with pytest.raises(GeminiModelError, match="GEMINI_MODEL_NAME"):
        await client.generate("analise")


@pytest.mark.asyncio
async def test_gemini_provider_reports_the_model_that_answered(fake_genai):
    fake_genai.missing = {"gemini-2.0-flash-exp"}
    provider = GeminiAnalysisProvider(GeminiClient(_gemini_settings()))

    result = await provider.analyze(ResearchContext(segmento="pets"))

    assert result.metadata["model"] == "gemini-2.0-flash"
    assert result.metadata["provider"] == "gemini"
    assert result.analysis.startswith("gemini-2.0-flash: ")

def test_collect_candidates_deduplicates():
    assert GeminiClient._collect_candidates(" gemini-1.5-pro ", ("gemini-1.5-pro", "x")) == [
        "gemini-1.5-pro",
        "x",
    ]
