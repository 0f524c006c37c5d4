"""
WebSift Search Module - result page scraping with provider fallback.

Providers are tried in priority order (DuckDuckGo, then Bing); when none
yields results the orchestrator returns clearly labelled demo entries.
"""

from .models import SearchOutcome, SearchResult
from .orchestrator import DEFAULT_BLOCKED_DOMAINS, SearchOrchestrator, demo_results
from .providers import BingProvider, DuckDuckGoProvider, SearchProvider

__all__ = [
    "BingProvider",
    "DEFAULT_BLOCKED_DOMAINS",
    "DuckDuckGoProvider",
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchProvider",
    "SearchResult",
    "demo_results",
]
