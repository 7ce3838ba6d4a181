"""Search client scraping DuckDuckGo's HTML results to gather reference material."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)


class WebSearchClient:
    """Perform keyless web searches against DuckDuckGo's HTML endpoint."""

    _BASE_URL = "https://duckduckgo.com/html/"

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout_seconds
        self._transport = transport

    async def search(self, query: str, *, num_results: int = 5) -> List[Dict[str, Any]]:
        """Execute a search query and return simplified results.

        Failures are logged and produce an empty list so research never
        blocks an analysis.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": _USER_AGENT},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(self._BASE_URL, params={"q": query})
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Web search for %r failed: %s", query, exc)
            return []

        return parse_results(response.text, num_results=num_results)


def parse_results(html: str, *, num_results: int) -> List[Dict[str, Any]]:
    """Extract title, snippet and URL from DuckDuckGo result blocks."""
    soup = BeautifulSoup(html, "html.parser")
    results: List[Dict[str, Any]] = []
    for element in soup.select(".result")[:num_results]:
        title_node = element.select_one(".result__title")
        snippet_node = element.select_one(".result__snippet")
        url_node = element.select_one(".result__url")
        title = title_node.get_text(strip=True) if title_node else ""
        snippet = snippet_node.get_text(strip=True) if snippet_node else ""
        if not title or not snippet:
            continue
        results.append(
            {
                "title": title,
                "snippet": snippet,
                "url": (url_node.get("href") if url_node else "") or "",
                "source": "web_search",
            }
        )
    return results


__all__ = ["WebSearchClient", "parse_results"]
