"""
Tests for SearchOrchestrator provider fallback, demo mode and helpers.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.helpers.metrics import metric_value
from websift.search.models import SearchOutcome, SearchResult
from websift.search.orchestrator import SearchOrchestrator, demo_results


def result(url: str, source: str = "duckduckgo", rank: int = 1) -> SearchResult:
    return SearchResult(title=f"Title {rank}", url=url, snippet="", source=source, rank=rank)


def provider(name: str, outcome=None, error: Exception = None):
    mock = MagicMock()
    mock.name = name
    mock.search = AsyncMock(return_value=outcome, side_effect=error)
    return mock


@pytest.mark.unit
class TestSearchWebsites:
    @pytest.mark.asyncio
    async def test_primary_results_win(self):
        primary = provider("duckduckgo", SearchOutcome.from_results("duckduckgo", (result("https://a.example/"),)))
        secondary = provider("bing", SearchOutcome.from_results("bing", (result("https://b.example/", "bing"),)))
        orchestrator = SearchOrchestrator([primary, secondary])

        results = await orchestrator.search_websites("python", 5)

        assert [r.url for r in results] == ["https://a.example/"]
        primary.search.assert_awaited_once_with("python", 5)
        secondary.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_through_to_secondary(self):
        primary = provider("duckduckgo", SearchOutcome.failure("duckduckgo", "timeout"))
        secondary = provider("bing", SearchOutcome.from_results("bing", (result("https://b.example/", "bing"),)))
        orchestrator = SearchOrchestrator([primary, secondary])

        results = await orchestrator.search_websites("python", 5)

        assert [r.source for r in results] == ["bing"]

    @pytest.mark.asyncio
    async def test_empty_primary_falls_through(self):
        primary = provider("duckduckgo", SearchOutcome.from_results("duckduckgo", ()))
        secondary = provider("bing", SearchOutcome.from_results("bing", (result("https://b.example/", "bing"),)))

        results = await SearchOrchestrator([primary, secondary]).search_websites("python", 5)

        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_all_failing_returns_demo_results(self):
        primary = provider("duckduckgo", SearchOutcome.failure("duckduckgo", "403"))
        secondary = provider("bing", SearchOutcome.failure("bing", "timeout"))
        orchestrator = SearchOrchestrator([primary, secondary])
        before = metric_value("websift_search_demo_fallback_total")

        results = await orchestrator.search_websites("openai", 2)

        assert len(results) == 2
        assert all(r.source == "demo" for r in results)
        assert all(r.snippet.startswith("[DEMO MODE] ") for r in results)
        assert [r.rank for r in results] == [1, 2]
        assert metric_value("websift_search_demo_fallback_total") == before + 1

    @pytest.mark.asyncio
    async def test_unexpected_provider_exception_returns_demo_results(self):
        primary = provider("duckduckgo", error=RuntimeError("bug"))
        orchestrator = SearchOrchestrator([primary])

        results = await orchestrator.search_websites("openai", 5)

        assert len(results) == 3
        assert results[0].url == "https://example.com"

    @pytest.mark.asyncio
    async def test_default_max_results(self):
        primary = provider("duckduckgo", SearchOutcome.failure("duckduckgo", "down"))
        orchestrator = SearchOrchestrator([primary], default_max_results=1)

        results = await orchestrator.search_websites("x")

        assert len(results) == 1
        primary.search.assert_awaited_once_with("x", 1)

    @pytest.mark.asyncio
    async def test_derived_queries(self):
        primary = provider("duckduckgo", SearchOutcome.from_results("duckduckgo", (result("https://a.example/"),)))
        orchestrator = SearchOrchestrator([primary])

        await orchestrator.search_specific_site("asyncio", "docs.python.org", 3)
        await orchestrator.search_file_type("report", "pdf", 3)
        await orchestrator.search_with_date_range("news", "2024", 3)

        queries = [call.args[0] for call in primary.search.await_args_list]
        assert queries == ["site:docs.python.org asyncio", "report filetype:pdf", "news 2024"]


@pytest.mark.unit
class TestDemoResults:
    def test_content(self):
        results = demo_results("openai", 5)

        assert [r.url for r in results] == [
            "https://example.com",
            "https://httpbin.org/html",
            "https://jsonplaceholder.typicode.com",
        ]
        assert results[0].title == "Example.com - Information about openai"
        assert results[1].title == "HTTPBin.org - Testing openai"
        assert results[2].title == "JsonPlaceholder - openai API"
        assert results[0].snippet == (
            "[DEMO MODE] Find comprehensive information about openai on this example website."
        )

    def test_zero_max_results(self):
        assert demo_results("x", 0) == []


@pytest.mark.unit
class TestHelpers:
    def test_validate_results_drops_blocked_and_malformed(self):
        orchestrator = SearchOrchestrator([])
        results = [
            result("https://docs.python.org/3/"),
            result("https://www.facebook.com/python"),
            result("https://m.youtube.com/watch?v=1"),
            result("not a url"),
            result("https://example.org/"),
        ]

        valid = orchestrator.validate_results(results)

        assert [r.url for r in valid] == ["https://docs.python.org/3/", "https://example.org/"]

    def test_validate_results_uses_configured_domains(self):
        orchestrator = SearchOrchestrator([], blocked_domains=["example.org"])
        valid = orchestrator.validate_results([result("https://example.org/"), result("https://facebook.com/")])
        assert [r.url for r in valid] == ["https://facebook.com/"]

    def test_search_suggestions(self):
        assert SearchOrchestrator.get_search_suggestions("python") == [
            "python tutorial",
            "python examples",
            "python guide",
            "python documentation",
            "python best practices",
        ]
