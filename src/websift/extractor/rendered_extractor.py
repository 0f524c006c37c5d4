"""
Rendered extraction: load the page in the shared headless browser and query
the live DOM, so script-generated content is visible.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from websift.crawler.user_agents import BROWSER_USER_AGENT
from websift.exceptions import RenderError

from .documents import LiveDocument, build_result
from .models import ExtractionRequest, ExtractionResult

if TYPE_CHECKING:
    from websift.crawler.browser import BrowserEngine

logger = structlog.get_logger(__name__)


class RenderedExtractor:
    """Extractor backed by a BrowserEngine the caller owns."""

    name = "rendered"

    def __init__(
        self,
        engine: BrowserEngine,
        *,
        user_agent: str = BROWSER_USER_AGENT,
        viewport_width: int = 1920,
        viewport_height: int = 1080,
        wait_for_selector_timeout_ms: int = 5000,
    ) -> None:
        self.engine = engine
        self.user_agent = user_agent
        self.viewport = {"width": viewport_width, "height": viewport_height}
        self.wait_for_selector_timeout_ms = wait_for_selector_timeout_ms

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        """Render ``request.url`` and apply the selector to the live DOM.

        Raises:
            RenderError: launch, navigation, selector-wait or evaluation failure
        """
        options = request.options
        start = time.monotonic()

        async with self.engine.page(
            user_agent=self.user_agent,
            viewport=self.viewport,
            extra_headers=options.extra_headers,
        ) as page:
            try:
                await page.goto(request.url, wait_until="networkidle", timeout=options.effective_timeout_ms)
            except PlaywrightTimeoutError as e:
                raise RenderError(
                    f"Navigation timeout of {options.effective_timeout_ms}ms exceeded for {request.url}"
                ) from e
            except PlaywrightError as e:
                raise RenderError(f"Navigation failed for {request.url}: {e}") from e

            if options.wait_for_selector:
                try:
                    await page.wait_for_selector(
                        options.wait_for_selector,
                        timeout=self.wait_for_selector_timeout_ms,
                    )
                except PlaywrightTimeoutError as e:
                    raise RenderError(
                        f"Selector {options.wait_for_selector!r} did not appear within "
                        f"{self.wait_for_selector_timeout_ms}ms"
                    ) from e
                except PlaywrightError as e:
                    raise RenderError(f"Waiting for {options.wait_for_selector!r} failed: {e}") from e

            result = await build_result(
                LiveDocument(page),
                url=request.url,
                selector=request.selector,
                method="rendered",
            )

        logger.debug("Rendered extraction finished", url=request.url, found=result.found)
        return result.with_duration(int((time.monotonic() - start) * 1000))
