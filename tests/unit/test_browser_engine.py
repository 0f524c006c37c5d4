"""
Tests for the shared BrowserEngine using a fake Playwright driver.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from websift.crawler.browser import BrowserEngine
from websift.exceptions import RenderError


class FakePlaywrightDriver:
    """Stands in for async_playwright(); counts launches and contexts."""

    def __init__(self, launch_error=None):
        self.launches = 0
        self.stops = 0
        self.launch_kwargs = None
        self.launch_error = launch_error
        self.browser = MagicMock()
        self.browser.is_connected.return_value = True
        self.browser.close = AsyncMock()
        self.context = MagicMock()
        self.context.new_page = AsyncMock(return_value=MagicMock(name="page"))
        self.context.close = AsyncMock()
        self.browser.new_context = AsyncMock(return_value=self.context)

    def __call__(self):
        return self

    async def start(self):
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(side_effect=self._launch)
        playwright.stop = AsyncMock(side_effect=self._stop)
        return playwright

    async def _launch(self, **kwargs):
        # yield so concurrent acquirers pile up on the lock
        await asyncio.sleep(0.01)
        if self.launch_error is not None:
            raise self.launch_error
        self.launches += 1
        self.launch_kwargs = kwargs
        return self.browser

    async def _stop(self):
        self.stops += 1


@pytest.mark.unit
class TestBrowserEngine:
    @pytest.mark.asyncio
    async def test_concurrent_first_use_launches_once(self):
        driver = FakePlaywrightDriver()
        engine = BrowserEngine(playwright_factory=driver)

        browsers = await asyncio.gather(*(engine.acquire() for _ in range(10)))

        assert driver.launches == 1
        assert engine.launch_count == 1
        assert all(browser is driver.browser for browser in browsers)

    @pytest.mark.asyncio
    async def test_launch_options(self):
        driver = FakePlaywrightDriver()
        engine = BrowserEngine(headless=True, chromium_sandbox=False, launch_args=["--disable-gpu"], playwright_factory=driver)

        await engine.acquire()

        assert driver.launch_kwargs == {"headless": True, "chromium_sandbox": False, "args": ["--disable-gpu"]}

    @pytest.mark.asyncio
    async def test_launch_failure_becomes_render_error(self):
        driver = FakePlaywrightDriver(launch_error=PlaywrightError("Executable doesn't exist"))
        engine = BrowserEngine(playwright_factory=driver)

        with pytest.raises(RenderError, match="Browser launch failed"):
            await engine.acquire()
        assert not engine.is_running
        assert driver.stops == 1

    @pytest.mark.asyncio
    async def test_disconnected_browser_is_not_silently_relaunched(self):
        driver = FakePlaywrightDriver()
        engine = BrowserEngine(playwright_factory=driver)
        await engine.acquire()
        driver.browser.is_connected.return_value = False

        with pytest.raises(RenderError):
            await engine.acquire()
        assert driver.launches == 1

        driver.browser.is_connected.return_value = True
        await engine.relaunch()
        assert driver.launches == 2

    @pytest.mark.asyncio
    async def test_page_context_closed_on_error(self):
        driver = FakePlaywrightDriver()
        engine = BrowserEngine(playwright_factory=driver)

        with pytest.raises(ValueError):
            async with engine.page(user_agent="UA", viewport={"width": 10, "height": 10}):
                raise ValueError("boom")

        driver.context.close.assert_awaited_once()
        driver.browser.new_context.assert_awaited_once_with(
            user_agent="UA", viewport={"width": 10, "height": 10}, extra_http_headers=None
        )

    @pytest.mark.asyncio
    async def test_each_page_gets_its_own_context(self):
        driver = FakePlaywrightDriver()
        engine = BrowserEngine(playwright_factory=driver)

        async with engine.page(extra_headers={"X-A": "1"}):
            pass
        async with engine.page():
            pass

        assert driver.browser.new_context.await_count == 2
        assert driver.context.close.await_count == 2
        assert driver.launches == 1

    @pytest.mark.asyncio
    async def test_release(self):
        driver = FakePlaywrightDriver()
        engine = BrowserEngine(playwright_factory=driver)
        await engine.acquire()

        await engine.release()
        await engine.release()

        driver.browser.close.assert_awaited_once()
        assert driver.stops == 1
        assert not engine.is_running
