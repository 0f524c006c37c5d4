"""
User agent strings and default request headers.

Page fetches present a realistic desktop browser; search requests identify
themselves honestly as an educational scraper.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

SEARCH_USER_AGENT = "Educational Web Scraper 1.0"

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def browser_headers(user_agent: str = BROWSER_USER_AGENT, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Headers for a page fetch; caller-supplied headers win."""
    headers = {
        "User-Agent": user_agent,
        "Accept": HTML_ACCEPT,
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
    }
    if extra:
        headers.update(extra)
    return headers


def search_headers(user_agent: str = SEARCH_USER_AGENT) -> Dict[str, str]:
    """Headers for a search engine result page request."""
    return {"User-Agent": user_agent, "Accept": HTML_ACCEPT}
