"""
Search engine providers.

Each provider issues one GET against an HTML result page and scrapes the
organic result blocks out of it. Failures never escape search(); they are
reported as a SearchOutcome with status "failed" so the orchestrator can move
on to the next provider.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from websift.crawler.user_agents import SEARCH_USER_AGENT, search_headers
from websift.observability.metrics import METRICS

from .models import SearchOutcome, SearchResult

if TYPE_CHECKING:
    from websift.crawler.http_client import HttpClient

logger = structlog.get_logger(__name__)

DUCKDUCKGO_URL = "https://html.duckduckgo.com/html/"
BING_URL = "https://www.bing.com/search"
SEARCH_TIMEOUT_MS = 10000


class SearchProvider:
    """
    Base class for HTML result page providers.

    Subclasses set ``name`` and the CSS selectors for a result block, its title
    link and its snippet; override _params() when the engine needs more than
    ``q``.
    """

    name = "provider"
    result_selector = ""
    title_selector = ""
    snippet_selector = ""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        endpoint: str,
        user_agent: str = SEARCH_USER_AGENT,
        timeout_ms: int = SEARCH_TIMEOUT_MS,
    ) -> None:
        self.http_client = http_client
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms
        self.logger = logger.bind(provider=self.name)

    def _params(self, query: str, max_results: int) -> Dict[str, str]:
        return {"q": query}

    def _parse(self, html: str, max_results: int) -> Tuple[SearchResult, ...]:
        soup = BeautifulSoup(html, "html.parser")
        results: List[SearchResult] = []

        for position, block in enumerate(soup.select(self.result_selector), start=1):
            if len(results) >= max_results:
                break

            link = block.select_one(self.title_selector)
            if link is None:
                continue

            title = link.get_text().strip()
            href = link.get("href") or ""
            if isinstance(href, list):
                href = " ".join(href)
            if not title or not href.startswith("http"):
                continue

            results.append(
                SearchResult(
                    title=title,
                    url=href,
                    snippet=self._snippet(block),
                    source=self.name,
                    rank=position,
                )
            )

        return tuple(results)

    def _snippet(self, block: Tag) -> str:
        element: Optional[Tag] = block.select_one(self.snippet_selector)
        return element.get_text().strip() if element is not None else ""

    async def search(self, query: str, max_results: int) -> SearchOutcome:
        """Query the engine; never raises."""
        try:
            page = await self.http_client.get(
                self.endpoint,
                params=self._params(query, max_results),
                headers=search_headers(self.user_agent),
                timeout_ms=self.timeout_ms,
            )
            results = self._parse(page.text, max_results)
        except Exception as e:
            self.logger.warning("Search provider failed", query=query, error=str(e), error_type=type(e).__name__)
            METRICS["search_requests_total"].labels(provider=self.name, outcome="failed").inc()
            return SearchOutcome.failure(self.name, str(e))

        outcome = SearchOutcome.from_results(self.name, results)
        METRICS["search_requests_total"].labels(provider=self.name, outcome=outcome.status).inc()
        self.logger.debug("Search provider returned", query=query, status=outcome.status, count=len(results))
        return outcome


class DuckDuckGoProvider(SearchProvider):
    """DuckDuckGo's JavaScript-free HTML endpoint."""

    name = "duckduckgo"
    result_selector = ".result"
    title_selector = ".result__title a"
    snippet_selector = ".result__snippet"

    def __init__(self, http_client: HttpClient, *, endpoint: str = DUCKDUCKGO_URL, **kwargs) -> None:
        super().__init__(http_client, endpoint=endpoint, **kwargs)


class BingProvider(SearchProvider):
    name = "bing"
    result_selector = ".b_algo"
    title_selector = "h2 a"
    snippet_selector = ".b_caption p, .b_caption div"

    def __init__(self, http_client: HttpClient, *, endpoint: str = BING_URL, **kwargs) -> None:
        super().__init__(http_client, endpoint=endpoint, **kwargs)

    def _params(self, query: str, max_results: int) -> Dict[str, str]:
        return {"q": query, "count": str(max_results)}


__all__ = ["BingProvider", "DuckDuckGoProvider", "SearchProvider"]
