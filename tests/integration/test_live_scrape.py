"""
End-to-end checks against real websites. Skipped unless WEBSIFT_NETWORK_TESTS=1.
"""

import pytest

from websift.container import DependencyContainer
from websift.extractor.models import ExtractionRequest


@pytest.mark.network
@pytest.mark.asyncio
async def test_example_com_static(test_config):
    container = DependencyContainer(config=test_config)

    async with container.lifecycle():
        result = await container.get_extraction().scrape_website(
            ExtractionRequest(url="https://example.com", selector="h1")
        )

    assert result.method == "static"
    assert result.found == 1
    assert result.elements[0].text == "Example Domain"
    assert result.metadata.title == "Example Domain"


@pytest.mark.network
@pytest.mark.asyncio
async def test_search_never_comes_back_empty(test_config):
    container = DependencyContainer(config=test_config)

    async with container.lifecycle():
        results = await container.get_search().search_websites("python asyncio", 3)

    assert 1 <= len(results) <= 3
    assert all(r.url.startswith("http") for r in results)
