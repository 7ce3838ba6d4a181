try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timezone

import pytest

from arq6.services import MarketResearchService, ResearchContext
from arq6.services.market_research import build_search_queries, build_trend_data
from arq6.services.prompts import (
    SYSTEM_PROMPT,
    build_analysis_prompt,
    build_chat_messages,
    build_single_prompt,
    format_web_research,
)


class RecordingSearchClient:
    def __init__(self, *, empty_for: set[str] | None = None) -> None:
        self.queries: list[tuple[str, int]] = []
        self.empty_for = empty_for or set()

    async def search(self, query: str, *, num_results: int = 5):
        self.queries.append((query, num_results))
        if query in self.empty_for:
            return []
        return [{"title": f"T {len(self.queries)}", "snippet": query, "source": "web_search"}]


def test_search_queries_cover_market_angles():
    queries = build_search_queries("pet shop", year=2025)

    assert queries == [
        "pet shop mercado brasileiro 2025",
        "pet shop tendências consumidor",
        "pet shop concorrentes principais",
        "pet shop preços mercado",
        "pet shop público alvo perfil",
    ]


def test_trend_data_is_deterministic():
    assert build_trend_data("café", year=2025) == build_trend_data("café", year=2025)
    assert build_trend_data("café", year=2025)["relatedKeywords"][0] == "café 2025"


@pytest.mark.asyncio
async def test_gather_runs_five_sequential_searches():
    search = RecordingSearchClient()
    service = MarketResearchService(search, delay_seconds=0, results_per_query=3)

    context = await service.gather("pet shop", "foco em SP")

    assert len(search.queries) == 5
    assert all(limit == 3 for _, limit in search.queries)
    assert len(context.web_results) == 5
    assert context.contexto_adicional == "foco em SP"
    assert context.trend_data["keyword"] == "pet shop"


@pytest.mark.asyncio
async def test_gather_sleeps_between_searches_only(monkeypatch):
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr("arq6.services.market_research.asyncio.sleep", fake_sleep)
    service = MarketResearchService(RecordingSearchClient(), delay_seconds=1.0)

    await service.gather("moda")

    assert delays == [1.0] * 4


@pytest.mark.asyncio
async def test_gather_tolerates_empty_searches():
    year = datetime.now(timezone.utc).year
    search = RecordingSearchClient(
        empty_for={f"moda mercado brasileiro {year}", "moda preços mercado"}
    )
    service = MarketResearchService(search, delay_seconds=0)

    context = await service.gather("moda")

    assert len(search.queries) == 5
    assert len(context.web_results) == 3


@pytest.mark.asyncio
async def test_gather_without_search_client():
    context = await MarketResearchService(None).gather("moda")

    assert context.web_results == []
    assert context.trend_data is not None


def test_format_web_research_truncates_snippets():
    text = format_web_research([{"title": "Longo", "snippet": "x" * 1000}])

    assert text.startswith("- Longo: ")
    assert text.endswith("...")
    assert len(text) == len("- Longo: ") + 400


def test_format_web_research_without_results():
    assert format_web_research([]) == "Nenhuma pesquisa disponível"


def test_analysis_prompt_interpolates_context():
    context = ResearchContext(
        segmento="cosméticos veganos",
        contexto_adicional="público jovem",
        web_results=[{"title": "Vegano cresce", "snippet": "alta de 20%"}],
        trend_data=build_trend_data("cosméticos veganos", year=2025),
        analysis_date=datetime(2025, 3, 1, tzinfo=timezone.utc),
    )

    prompt = build_analysis_prompt(context)

    assert "- Segmento: cosméticos veganos" in prompt
    assert "- Contexto adicional: público jovem" in prompt
    assert "- Vegano cresce: alta de 20%" in prompt
    assert "2025-03-01" in prompt
    assert "cosméticos veganos 2025" in prompt
    assert "## 🎯 SÍNTESE ESTRATÉGICA" in prompt


def test_prompt_variants_include_system_framing():
    context = ResearchContext(segmento="moda")

    single = build_single_prompt(context)
    messages = build_chat_messages(context)

    assert single.startswith(SYSTEM_PROMPT)
    assert "Contexto adicional: Não fornecido" in single
    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert messages[1]["content"] == build_analysis_prompt(context)
