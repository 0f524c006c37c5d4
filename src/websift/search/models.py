"""
Search result values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Tuple

OutcomeStatus = Literal["ok", "empty", "failed"]


@dataclass(slots=True, frozen=True)
class SearchResult:
    """One entry from a search engine result page, or a demo placeholder."""

    title: str
    url: str
    snippet: str
    source: str
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "snippet": self.snippet,
            "source": self.source,
            "rank": self.rank,
        }


@dataclass(slots=True, frozen=True)
class SearchOutcome:
    """What one provider produced for one query."""

    provider: str
    status: OutcomeStatus
    results: Tuple[SearchResult, ...] = ()
    error: Optional[str] = None

    @classmethod
    def from_results(cls, provider: str, results: Tuple[SearchResult, ...]) -> SearchOutcome:
        return cls(provider=provider, status="ok" if results else "empty", results=results)

    @classmethod
    def failure(cls, provider: str, error: str) -> SearchOutcome:
        return cls(provider=provider, status="failed", error=error)

    @property
    def ok(self) -> bool:
        return self.status == "ok"
