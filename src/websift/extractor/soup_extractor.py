"""
Static extraction: one HTTP exchange, BeautifulSoup parse, selector query.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from websift.crawler.user_agents import BROWSER_USER_AGENT, browser_headers

from .documents import SoupDocument, build_result
from .models import ExtractionRequest, ExtractionResult

if TYPE_CHECKING:
    from websift.crawler.http_client import HttpClient

logger = structlog.get_logger(__name__)


class StaticExtractor:
    """Extractor that never executes page scripts."""

    name = "static"

    def __init__(self, http_client: HttpClient, *, user_agent: str = BROWSER_USER_AGENT) -> None:
        self.http_client = http_client
        self.user_agent = user_agent

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        """Fetch ``request.url`` over plain HTTP and apply the selector.

        Raises:
            FetchError: network, timeout, HTTP status or redirect failure
            SelectorError: the selector cannot be parsed
        """
        options = request.options
        page = await self.http_client.get(
            request.url,
            headers=browser_headers(self.user_agent, options.extra_headers),
            timeout_ms=options.effective_timeout_ms,
        )

        # Parsing is CPU-bound; keep it off the event loop
        loop = asyncio.get_running_loop()
        document = await loop.run_in_executor(None, SoupDocument.from_html, page.text)

        result = await build_result(document, url=request.url, selector=request.selector, method="static")
        logger.debug(
            "Static extraction finished",
            url=request.url,
            final_url=page.final_url,
            status=page.status,
            found=result.found,
        )
        return result.with_duration(page.elapsed_ms)
