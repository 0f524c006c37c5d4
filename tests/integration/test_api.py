"""
HTTP API tests using FastAPI's TestClient against a real container whose
extraction and search components are replaced with doubles.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tests.helpers.fakes import FakeExtractor, make_result
from websift.batch import BatchScrapeCoordinator
from websift.container import DependencyContainer
from websift.exceptions import FetchError, ScrapeError
from websift.extractor.manager import ExtractionOrchestrator
from websift.search.models import SearchResult
from websift.web.main import create_app


@pytest.fixture
def container(test_config):
    return DependencyContainer(config=test_config)


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as client:
        yield client


def search_results(count: int):
    return [
        SearchResult(title=f"Site {i}", url=f"https://site{i}.example/", snippet="s", source="duckduckgo", rank=i)
        for i in range(1, count + 1)
    ]


@pytest.mark.integration
class TestHealthAndFallback:
    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["uptime"] >= 0
        assert body["timestamp"].endswith("Z")
        assert "X-Request-ID" in response.headers

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_unknown_api_route(self, client):
        response = client.delete("/api/does/not/exist")

        assert response.status_code == 404
        assert response.json() == {
            "error": "API endpoint not found",
            "path": "/api/does/not/exist",
            "method": "DELETE",
            "availableEndpoints": [
                "GET /api/health",
                "POST /api/scrape",
                "POST /api/search-scrape",
                "POST /api/validate-url",
            ],
        }

    def test_metrics(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "websift_scrapes_total" in response.text


@pytest.mark.integration
class TestScrapeEndpoint:
    def test_missing_url(self, client):
        response = client.post("/api/scrape", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "URL is required"}

    def test_invalid_url(self, client):
        response = client.post("/api/scrape", json={"url": "not a url"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid URL format"}

    def test_success(self, client, container):
        container.extraction = AsyncMock()
        container.extraction.scrape_website.return_value = make_result("https://example.com/", selector="h1")

        response = client.post("/api/scrape", json={"url": "https://example.com/", "selector": "h1"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["url"] == "https://example.com/"
        assert body["data"]["found"] == 0
        assert "durationMs" in body["data"]
        assert body["scrapedAt"].endswith("Z")

    def test_options_are_mapped(self, client, container):
        container.extraction = AsyncMock()
        container.extraction.scrape_website.return_value = make_result("https://example.com/")

        client.post(
            "/api/scrape",
            json={
                "url": "https://example.com/",
                "options": {"timeout": 5000, "javascript": True, "waitForSelector": "#app", "headers": {"X-A": "1"}},
            },
        )

        request = container.extraction.scrape_website.await_args.args[0]
        assert request.selector == "h1, h2, h3, p"
        assert request.options.timeout_ms == 5000
        assert request.options.render_javascript is True
        assert request.options.wait_for_selector == "#app"
        assert request.options.extra_headers["X-A"] == "1"

    def test_timeout_ms_alias(self, client, container):
        container.extraction = AsyncMock()
        container.extraction.scrape_website.return_value = make_result("https://example.com/")

        client.post("/api/scrape", json={"url": "https://example.com/", "options": {"timeoutMs": 7000}})

        assert container.extraction.scrape_website.await_args.args[0].options.timeout_ms == 7000

    def test_failure(self, client, container):
        container.extraction = AsyncMock()
        container.extraction.scrape_website.side_effect = ScrapeError(
            "https://example.com/", FetchError("Request failed with status code 503")
        )

        response = client.post("/api/scrape", json={"url": "https://example.com/"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Scraping failed",
            "message": "Scraping failed for https://example.com/: Request failed with status code 503",
        }


@pytest.mark.integration
class TestSearchScrapeEndpoint:
    def test_missing_query(self, client):
        response = client.post("/api/search-scrape", json={"maxResults": 3})

        assert response.status_code == 400
        assert response.json() == {"error": "Search query is required"}

    def test_no_results(self, client, container):
        container.search = AsyncMock()
        container.search.search_websites.return_value = []

        response = client.post("/api/search-scrape", json={"query": "python", "maxResults": 0})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"query": "python", "searchResults": [], "scrapedData": [], "message": "No search results found"},
        }

    def test_partial_failure(self, client, container):
        found = search_results(3)
        container.search = AsyncMock()
        container.search.search_websites.return_value = found

        class SecondFails:
            async def scrape_website(self, request):
                if request.url == found[1].url:
                    raise ScrapeError(request.url, FetchError("Request failed with status code 500"))
                return make_result(request.url)

        container.batch = BatchScrapeCoordinator(SecondFails())

        response = client.post("/api/search-scrape", json={"query": "python", "maxResults": 3})

        assert response.status_code == 200
        data = response.json()["data"]
        container.search.search_websites.assert_awaited_once_with("python", 3)
        assert data["query"] == "python"
        assert [r["url"] for r in data["searchResults"]] == [r.url for r in found]
        assert [item["success"] for item in data["scrapedData"]] == [True, False, True]
        assert data["scrapedData"][1]["error"].startswith("Scraping failed for https://site2.example/")
        assert data["scrapedData"][0]["title"] == "Site 1"
        assert data["summary"] == {"totalFound": 3, "successfulScrapes": 2, "failedScrapes": 1}

    def test_batch_uses_real_orchestrator_fallback(self, client, container):
        container.search = AsyncMock()
        container.search.search_websites.return_value = search_results(1)
        static = FakeExtractor("static", error=FetchError("blocked"))
        rendered = FakeExtractor("rendered")
        container.batch = BatchScrapeCoordinator(ExtractionOrchestrator(static, rendered))

        response = client.post("/api/search-scrape", json={"query": "python"})

        item = response.json()["data"]["scrapedData"][0]
        assert item["success"] is True
        assert item["scraped"]["method"] == "rendered"
        assert rendered.requests[0].options.timeout_ms == 15000

    def test_unexpected_failure(self, client, container):
        container.search = AsyncMock()
        container.search.search_websites.side_effect = RuntimeError("search exploded")

        response = client.post("/api/search-scrape", json={"query": "python"})

        assert response.status_code == 500
        assert response.json() == {"error": "Search and scrape failed", "message": "search exploded"}


@pytest.mark.integration
class TestValidateUrlEndpoint:
    def test_valid(self, client):
        response = client.post("/api/validate-url", json={"url": "https://example.com/docs?x=1"})

        assert response.json() == {
            "valid": True,
            "protocol": "https:",
            "hostname": "example.com",
            "pathname": "/docs",
        }

    @pytest.mark.parametrize("payload", [{"url": "not a url"}, {}])
    def test_invalid(self, client, payload):
        assert client.post("/api/validate-url", json=payload).json() == {"valid": False}
