"""
Shared headless Chromium handle.

One browser process serves every rendered extraction. It is launched on first
use, owned by whoever constructed the engine (normally the DependencyContainer)
and released explicitly. Each render gets its own browser context, so
concurrent pages never share cookies, storage or DOM state.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional, Sequence

import structlog
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from websift.exceptions import RenderError
from websift.observability.metrics import METRICS

logger = structlog.get_logger(__name__)

DEFAULT_LAUNCH_ARGS = (
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)


class BrowserEngine:
    """
    Lazily launched, explicitly released Playwright Chromium instance.

    acquire() is safe to call from many tasks at once: the launch is guarded by
    an asyncio.Lock with a re-check, so simultaneous first callers share one
    browser. A crashed browser is not relaunched behind the caller's back;
    acquire() keeps failing until relaunch() is called.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        chromium_sandbox: bool = False,
        launch_args: Sequence[str] = DEFAULT_LAUNCH_ARGS,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.headless = headless
        self.chromium_sandbox = chromium_sandbox
        self.launch_args: List[str] = list(launch_args)
        self._playwright_factory = playwright_factory

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()
        self._launch_count = 0

    @property
    def launch_count(self) -> int:
        """How many times a browser process has been launched."""
        return self._launch_count

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it on first use."""
        browser = self._browser
        if browser is None:
            async with self._lock:
                # Another task may have launched while we waited for the lock
                if self._browser is None:
                    self._browser = await self._launch()
                browser = self._browser

        if not browser.is_connected():
            raise RenderError("Browser process is no longer connected; relaunch required")
        return browser

    async def _launch(self) -> Browser:
        logger.info("Launching headless browser", headless=self.headless, args=self.launch_args)
        try:
            self._playwright = await self._playwright_factory().start()
            browser = await self._playwright.chromium.launch(
                headless=self.headless,
                chromium_sandbox=self.chromium_sandbox,
                args=self.launch_args,
            )
        except PlaywrightError as e:
            await self._stop_playwright()
            raise RenderError(f"Browser launch failed: {e}") from e

        self._launch_count += 1
        METRICS["browser_launches_total"].inc()
        return browser

    async def release(self) -> None:
        """Close the browser and stop Playwright. Safe to call when not running."""
        async with self._lock:
            browser, self._browser = self._browser, None
            if browser is not None:
                try:
                    await browser.close()
                except PlaywrightError as e:
                    logger.warning("Error closing browser", error=str(e))
            await self._stop_playwright()
        logger.info("Browser released")

    async def relaunch(self) -> Browser:
        """Discard the current browser (e.g. after a crash) and launch a new one."""
        await self.release()
        return await self.acquire()

    async def _stop_playwright(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                await playwright.stop()
            except PlaywrightError as e:
                logger.warning("Error stopping Playwright", error=str(e))

    @asynccontextmanager
    async def page(
        self,
        *,
        user_agent: Optional[str] = None,
        viewport: Optional[Dict[str, int]] = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> AsyncIterator[Page]:
        """
        Open an isolated page; its context is closed on every exit path.

        Raises:
            RenderError: if the browser cannot be acquired or the page cannot be opened
        """
        browser = await self.acquire()
        try:
            context = await browser.new_context(
                user_agent=user_agent,
                viewport=viewport,
                extra_http_headers=dict(extra_headers) if extra_headers else None,
            )
        except PlaywrightError as e:
            raise RenderError(f"Could not open browser page: {e}") from e

        try:
            page = await context.new_page()
            yield page
        except PlaywrightError as e:
            raise RenderError(str(e)) from e
        finally:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.debug("Error closing browser context", error=str(e))

    def get_stats(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "launch_count": self._launch_count,
            "headless": self.headless,
        }
