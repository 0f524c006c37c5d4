"""
Dependency injection container for WebSift components.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, Optional
from uuid import uuid4

import structlog

from websift.batch import BatchScrapeCoordinator
from websift.config import Config
from websift.crawler.browser import BrowserEngine
from websift.crawler.http_client import HttpClient
from websift.crawler.robots_parser import PolicyChecker
from websift.extractor.manager import ExtractionOrchestrator
from websift.extractor.rendered_extractor import RenderedExtractor
from websift.extractor.soup_extractor import StaticExtractor
from websift.search.orchestrator import SearchOrchestrator
from websift.search.providers import BingProvider, DuckDuckGoProvider


class DependencyContainer:
    """
    Builds every WebSift component from one Config and owns their resources.

    The HTTP session is opened by initialize(); the browser is only launched
    on the first rendered extraction. shutdown() releases the browser and
    closes both HTTP clients.
    """

    def __init__(self, config: Optional[Config] = None, config_path: Optional[Path] = None) -> None:
        self.config_path = config_path
        self.config: Optional[Config] = config
        self.logger = structlog.get_logger(self.__class__.__name__)

        self.http_client: Optional[HttpClient] = None
        self.browser: Optional[BrowserEngine] = None
        self.policy_checker: Optional[PolicyChecker] = None
        self.extraction: Optional[ExtractionOrchestrator] = None
        self.search: Optional[SearchOrchestrator] = None
        self.batch: Optional[BatchScrapeCoordinator] = None

        self.instance_id = str(uuid4())
        self.started_at: Optional[float] = None
        self.is_running = False

    async def initialize(self) -> None:
        """Load configuration (unless one was given) and build all components."""
        if self.config is None:
            self.load_config()
        await self._create_instances()

        self.started_at = time.monotonic()
        self.is_running = True
        self.logger.info(
            "Dependency container initialized",
            instance_id=self.instance_id,
            config_path=str(self.config_path) if self.config_path else "default",
        )

    def load_config(self) -> Config:
        if self.config_path and self.config_path.exists():
            self.config = Config.from_yaml(self.config_path)
        else:
            self.config = Config()
        return self.config

    async def _create_instances(self) -> None:
        if self.config is None:
            raise RuntimeError("Configuration must be loaded before creating instances")
        config = self.config

        self.http_client = HttpClient(
            user_agent=config.scraper.user_agent,
            default_timeout_ms=config.scraper.timeout_ms,
            max_redirects=config.scraper.max_redirects,
        )
        await self.http_client.initialize()

        self.browser = BrowserEngine(
            headless=config.browser.headless,
            chromium_sandbox=config.browser.chromium_sandbox,
            launch_args=config.browser.launch_args,
        )
        self.policy_checker = PolicyChecker(
            user_agent=config.scraper.user_agent,
            timeout_seconds=config.robots.timeout_seconds,
            agent_tokens=config.robots.agent_tokens,
            enabled=config.robots.enabled,
        )

        static = StaticExtractor(self.http_client, user_agent=config.scraper.user_agent)
        rendered = RenderedExtractor(
            self.browser,
            user_agent=config.scraper.user_agent,
            viewport_width=config.browser.viewport_width,
            viewport_height=config.browser.viewport_height,
            wait_for_selector_timeout_ms=config.browser.wait_for_selector_timeout_ms,
        )
        self.extraction = ExtractionOrchestrator(static, rendered, self.policy_checker)

        provider_kwargs = {"user_agent": config.search.user_agent, "timeout_ms": config.search.timeout_ms}
        self.search = SearchOrchestrator(
            [
                DuckDuckGoProvider(self.http_client, endpoint=config.search.duckduckgo_url, **provider_kwargs),
                BingProvider(self.http_client, endpoint=config.search.bing_url, **provider_kwargs),
            ],
            default_max_results=config.search.default_max_results,
            blocked_domains=config.search.blocked_domains,
        )
        self.batch = BatchScrapeCoordinator(self.extraction, item_timeout_ms=config.batch.item_timeout_ms)

    def _require(self, component: Optional[Any], name: str) -> Any:
        if component is None:
            raise RuntimeError(f"{name} is not available; initialize the container first")
        return component

    def get_extraction(self) -> ExtractionOrchestrator:
        return self._require(self.extraction, "ExtractionOrchestrator")

    def get_search(self) -> SearchOrchestrator:
        return self._require(self.search, "SearchOrchestrator")

    def get_batch(self) -> BatchScrapeCoordinator:
        return self._require(self.batch, "BatchScrapeCoordinator")

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator[DependencyContainer]:
        """Context manager for proper lifecycle management."""
        try:
            await self.initialize()
            yield self
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Graceful shutdown of all managed instances."""
        if not self.is_running:
            return

        self.logger.info("Shutting down dependency container", instance_id=self.instance_id)

        await self._cleanup_instances()

        self.is_running = False
        self.logger.info("Dependency container shutdown complete")

    async def _cleanup_instances(self) -> None:
        cleanups: Dict[str, Optional[Callable[[], Any]]] = {
            "browser": self.browser.release if self.browser else None,
            "policy_checker": self.policy_checker.close if self.policy_checker else None,
            "http_client": self.http_client.close if self.http_client else None,
        }
        for name, cleanup in cleanups.items():
            if cleanup is None:
                continue
            try:
                await cleanup()
            except Exception as e:
                self.logger.error(f"Error cleaning up {name}", error=str(e))

    @property
    def uptime_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def get_health_status(self) -> Dict[str, Any]:
        """Get health status of all managed components."""
        return {
            "instance_id": self.instance_id,
            "is_running": self.is_running,
            "config_loaded": self.config is not None,
            "config_path": str(self.config_path) if self.config_path else None,
            "uptime_seconds": self.uptime_seconds,
            "browser": self.browser.get_stats() if self.browser else None,
            "http_client": self.http_client.get_stats() if self.http_client else None,
            "extraction": self.extraction.get_metrics() if self.extraction else None,
        }
