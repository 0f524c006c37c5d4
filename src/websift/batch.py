"""
Concurrent scraping of a list of search results with per-item isolation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Tuple

import structlog

from websift.extractor.models import DEFAULT_SELECTOR, ExtractionRequest, ExtractionResult, ScrapeOptions
from websift.observability.metrics import METRICS
from websift.search.models import SearchResult

if TYPE_CHECKING:
    from websift.extractor.manager import ExtractionOrchestrator

logger = structlog.get_logger(__name__)

BATCH_ITEM_TIMEOUT_MS = 15000


@dataclass(slots=True, frozen=True)
class BatchItem:
    """One search result paired with its scrape outcome."""

    result: SearchResult
    scraped: Optional[ExtractionResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.scraped is not None

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data["scraped"] = self.scraped.to_dict() if self.scraped is not None else None
        data["error"] = self.error
        data["success"] = self.success
        return data


@dataclass(slots=True, frozen=True)
class BatchReport:
    items: Tuple[BatchItem, ...]

    @property
    def summary(self) -> Dict[str, int]:
        successful = sum(1 for item in self.items if item.success)
        return {
            "totalFound": len(self.items),
            "successfulScrapes": successful,
            "failedScrapes": len(self.items) - successful,
        }


class BatchScrapeCoordinator:
    """
    Scrapes every search result concurrently.

    A failing item never affects its siblings; scrape_all() always returns one
    BatchItem per input, in input order.
    """

    def __init__(self, orchestrator: ExtractionOrchestrator, *, item_timeout_ms: int = BATCH_ITEM_TIMEOUT_MS) -> None:
        self.orchestrator = orchestrator
        self.item_timeout_ms = item_timeout_ms

    async def _scrape_one(self, result: SearchResult, selector: str, options: ScrapeOptions) -> ExtractionResult:
        request = ExtractionRequest(url=result.url, selector=selector, options=options)
        return await self.orchestrator.scrape_website(request)

    async def scrape_all(
        self,
        results: Sequence[SearchResult],
        selector: str = DEFAULT_SELECTOR,
        options: Optional[ScrapeOptions] = None,
    ) -> BatchReport:
        item_options = (options or ScrapeOptions()).with_timeout(self.item_timeout_ms)

        outcomes = await asyncio.gather(
            *(self._scrape_one(result, selector, item_options) for result in results),
            return_exceptions=True,
        )

        items = []
        for result, outcome in zip(results, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                METRICS["batch_items_total"].labels(outcome="failure").inc()
                logger.info("Batch item failed", url=result.url, error=str(outcome))
                items.append(BatchItem(result=result, error=str(outcome)))
            else:
                METRICS["batch_items_total"].labels(outcome="success").inc()
                items.append(BatchItem(result=result, scraped=outcome))

        report = BatchReport(items=tuple(items))
        logger.info("Batch scrape completed", **report.summary)
        return report
