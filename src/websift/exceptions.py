"""
Exception hierarchy for WebSift.

Policy and search failures never surface as exceptions; they are reported as
values (PolicyDecision, SearchOutcome). Everything below is raised by the
extraction path and reaches the caller wrapped in a single ScrapeError.
"""

from __future__ import annotations


class WebSiftError(Exception):
    """Base class for all WebSift errors."""


class ExtractionError(WebSiftError):
    """A single extraction strategy failed."""


class FetchError(ExtractionError):
    """Network, timeout, HTTP status or redirect failure during a static fetch."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class RenderError(ExtractionError):
    """Browser launch, navigation, selector-wait or evaluation failure."""


class SelectorError(ExtractionError):
    """The selector expression could not be applied to the document."""


class ScrapeError(WebSiftError):
    """Orchestration-level failure carrying the target URL and innermost cause."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Scraping failed for {url}: {cause}")
        self.url = url
        self.cause = cause
