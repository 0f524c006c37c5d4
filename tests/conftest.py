"""
Shared test configuration for WebSift.

Provides fixtures for sample markup, configuration and an initialized
HttpClient, and skips network tests unless explicitly enabled.
"""

import os

import pytest
import pytest_asyncio

from websift.config import Config
from websift.crawler.http_client import HttpClient

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_collection_modifyitems(config, items):
    """Skip network tests unless WEBSIFT_NETWORK_TESTS=1."""
    if os.environ.get("WEBSIFT_NETWORK_TESTS") == "1":
        return
    skip_network = pytest.mark.skip(reason="set WEBSIFT_NETWORK_TESTS=1 to run network tests")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# ============================================================================
# Markup Fixtures
# ============================================================================


@pytest.fixture
def sample_html():
    """A small article page with metadata, empty elements and script noise."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="iso-8859-1">
        <title>  Test Article  </title>
        <meta name="description" content="Sample article for testing">
        <meta name="keywords" content="testing, scraping">
        <meta name="viewport" content="width=device-width, initial-scale=1">
        <script>var h1 = "<h1>not a heading</h1>";</script>
        <style>p { color: red; }</style>
    </head>
    <body>
        <h1 id="main-title" class="title  hero">Test Article Title</h1>
        <p>   </p>
        <p>This is a sample paragraph with <strong>bold text</strong>.</p>
        <h2></h2>
        <h2 data-section="intro">Introduction</h2>
        <noscript><p>Enable JavaScript</p></noscript>
    </body>
    </html>
    """


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_config():
    """Configuration with network-touching features turned down for tests."""
    config = Config()
    config.robots.enabled = False
    config.monitoring.log_level = "WARNING"
    return config


# ============================================================================
# Component Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def http_client():
    """An initialized HttpClient; pair with aioresponses to stub the network."""
    async with HttpClient(default_timeout_ms=5000) as client:
        yield client

