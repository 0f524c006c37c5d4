"""
ExtractionOrchestrator: picks the static or rendered strategy for a request
and falls back from static to rendered once.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Dict, Optional

import structlog

from websift.exceptions import ScrapeError
from websift.observability.metrics import METRICS

from .models import ExtractionRequest, ExtractionResult
from .protocols import Extractor

if TYPE_CHECKING:
    from websift.crawler.robots_parser import PolicyChecker

logger = structlog.get_logger(__name__)


class ExtractionOrchestrator:
    """
    Runs one extraction request end to end.

    Features:
    - Advisory robots.txt check before every request
    - Rendered-only path when the caller asks for JavaScript
    - Static-first path with a single rendered fallback
    - End-to-end duration and per-strategy metrics
    """

    def __init__(
        self,
        static_extractor: Extractor,
        rendered_extractor: Extractor,
        policy_checker: Optional[PolicyChecker] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            static_extractor: Strategy used for plain HTTP fetches
            rendered_extractor: Strategy used for browser rendering
            policy_checker: Advisory robots.txt checker; skipped when None
        """
        self.static_extractor = static_extractor
        self.rendered_extractor = rendered_extractor
        self.policy_checker = policy_checker
        self.logger = logger.bind(component="ExtractionOrchestrator")

        self._extraction_metrics: Dict[str, Dict[str, float]] = {
            name: {"attempts": 0, "successes": 0, "total_time": 0.0}
            for name in (static_extractor.name, rendered_extractor.name)
        }

    async def _run(self, extractor: Extractor, request: ExtractionRequest) -> ExtractionResult:
        stats = self._extraction_metrics[extractor.name]
        stats["attempts"] += 1
        start_time = time.monotonic()
        try:
            result = await extractor.extract(request)
        finally:
            stats["total_time"] += time.monotonic() - start_time
        stats["successes"] += 1
        return result

    async def _check_policy(self, url: str) -> None:
        # Advisory only: the decision is logged by the checker and never gates extraction
        if self.policy_checker is None:
            return
        try:
            await self.policy_checker.check(url)
        except Exception as e:
            self.logger.debug("Robots check raised, ignoring", url=url, error=str(e))

    async def _extract(self, request: ExtractionRequest) -> ExtractionResult:
        if request.options.render_javascript:
            return await self._run(self.rendered_extractor, request)

        try:
            return await self._run(self.static_extractor, request)
        except Exception as e:
            self.logger.info(
                "Static extraction failed, falling back to rendering",
                url=request.url,
                error=str(e),
                error_type=type(e).__name__,
            )
        return await self._run(self.rendered_extractor, request)

    async def scrape_website(self, request: ExtractionRequest) -> ExtractionResult:
        """
        Extract ``request.selector`` from ``request.url``.

        Args:
            request: The extraction request

        Returns:
            ExtractionResult whose duration_ms covers the whole operation

        Raises:
            ScrapeError: wrapping the final strategy failure
        """
        start_time = time.monotonic()
        method = "failed"

        try:
            await self._check_policy(request.url)

            result = await self._extract(request)
            method = result.method
            return result.with_duration(int((time.monotonic() - start_time) * 1000))
        except Exception as e:
            self.logger.error(
                "Extraction failed",
                url=request.url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ScrapeError(request.url, e) from e
        finally:
            elapsed = time.monotonic() - start_time
            outcome = "failure" if method == "failed" else "success"
            METRICS["scrapes_total"].labels(method=method, outcome=outcome).inc()
            METRICS["scrape_duration_seconds"].observe(elapsed)
            self.logger.info(
                "Scraping completed",
                url=request.url,
                method=method,
                duration_ms=int(elapsed * 1000),
            )

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """
        Get extraction performance metrics.

        Returns:
            Dictionary of metrics per strategy
        """
        metrics = {}

        for extractor_name, raw_metrics in self._extraction_metrics.items():
            attempts = raw_metrics["attempts"]
            successes = raw_metrics["successes"]
            total_time = raw_metrics["total_time"]

            metrics[extractor_name] = {
                "attempts": attempts,
                "successes": successes,
                "success_rate": successes / attempts if attempts > 0 else 0.0,
                "total_time": total_time,
                "avg_time": total_time / attempts if attempts > 0 else 0.0,
            }

        return metrics
