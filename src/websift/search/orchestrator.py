"""
SearchOrchestrator: provider fallback with a demo-mode floor.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple
from urllib.parse import urlsplit

import structlog

from websift.observability.metrics import METRICS

from .models import SearchResult
from .providers import SearchProvider

logger = structlog.get_logger(__name__)

DEFAULT_BLOCKED_DOMAINS = (
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "linkedin.com",
    "youtube.com",
)

DEMO_PREFIX = "[DEMO MODE] "

# (title, url, snippet) templates; {query} is substituted
_DEMO_SITES: Tuple[Tuple[str, str, str], ...] = (
    (
        "Example.com - Information about {query}",
        "https://example.com",
        "Find comprehensive information about {query} on this example website.",
    ),
    (
        "HTTPBin.org - Testing {query}",
        "https://httpbin.org/html",
        "A simple HTML page for testing web scraping with {query} related content.",
    ),
    (
        "JsonPlaceholder - {query} API",
        "https://jsonplaceholder.typicode.com",
        "Free to use fake online REST API for testing and prototyping related to {query}.",
    ),
)

_SUGGESTION_SUFFIXES = ("tutorial", "examples", "guide", "documentation", "best practices")


def demo_results(query: str, max_results: int) -> List[SearchResult]:
    """Canned results that let the rest of the pipeline run when every provider fails."""
    results = [
        SearchResult(
            title=title.format(query=query),
            url=url,
            snippet=DEMO_PREFIX + snippet.format(query=query),
            source="demo",
            rank=rank,
        )
        for rank, (title, url, snippet) in enumerate(_DEMO_SITES, start=1)
    ]
    return results[: max(max_results, 0)]


class SearchOrchestrator:
    """
    Tries providers in priority order and returns the first non-empty result
    list. When every provider comes back empty or failed, returns the demo set
    instead, so search_websites() never raises and never returns an empty list
    for a positive max_results.
    """

    def __init__(
        self,
        providers: Sequence[SearchProvider],
        *,
        default_max_results: int = 5,
        blocked_domains: Iterable[str] = DEFAULT_BLOCKED_DOMAINS,
    ) -> None:
        self.providers = list(providers)
        self.default_max_results = default_max_results
        self.blocked_domains = tuple(blocked_domains)
        self.logger = logger.bind(component="SearchOrchestrator")

    async def search_websites(self, query: str, max_results: int | None = None) -> List[SearchResult]:
        """
        Search for ``query`` and return at most ``max_results`` results.

        Args:
            query: Free-text search query
            max_results: Result cap; defaults to the configured value

        Returns:
            Provider results, or demo results when no provider produced any
        """
        limit = self.default_max_results if max_results is None else max_results

        try:
            for provider in self.providers:
                outcome = await provider.search(query, limit)
                if outcome.ok:
                    self.logger.info(
                        "Search completed",
                        query=query,
                        provider=outcome.provider,
                        count=len(outcome.results),
                    )
                    return list(outcome.results)
                self.logger.info(
                    "Provider produced no results, trying next",
                    query=query,
                    provider=outcome.provider,
                    status=outcome.status,
                    error=outcome.error,
                )
        except Exception as e:
            self.logger.error("Search failed unexpectedly", query=query, error=str(e), error_type=type(e).__name__)

        METRICS["search_demo_fallback_total"].inc()
        self.logger.warning("All search providers failed, using demo results", query=query)
        return demo_results(query, limit)

    async def search_specific_site(self, query: str, site: str, max_results: int | None = None) -> List[SearchResult]:
        return await self.search_websites(f"site:{site} {query}", max_results)

    async def search_file_type(self, query: str, file_type: str, max_results: int | None = None) -> List[SearchResult]:
        return await self.search_websites(f"{query} filetype:{file_type}", max_results)

    async def search_with_date_range(
        self, query: str, date_range: str, max_results: int | None = None
    ) -> List[SearchResult]:
        return await self.search_websites(f"{query} {date_range}", max_results)

    def validate_results(self, results: Iterable[SearchResult]) -> List[SearchResult]:
        """Drop results with unparseable URLs or hosts on the blocked list."""
        valid = []
        for result in results:
            try:
                parts = urlsplit(result.url)
            except ValueError:
                continue
            hostname = parts.hostname or ""
            if not parts.scheme or not hostname:
                continue
            if any(domain in hostname for domain in self.blocked_domains):
                continue
            valid.append(result)
        return valid

    @staticmethod
    def get_search_suggestions(query: str) -> List[str]:
        return [f"{query} {suffix}" for suffix in _SUGGESTION_SUFFIXES]
