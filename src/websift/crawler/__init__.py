"""
WebSift Crawler Module - network access for extraction and search.

- HttpClient: pooled aiohttp session with per-call timeouts and a redirect cap
- PolicyChecker: advisory robots.txt inspection
- BrowserEngine: lazily launched, explicitly owned headless Chromium
"""

from .browser import BrowserEngine
from .http_client import FetchedPage, HttpClient
from .robots_parser import PolicyChecker, PolicyDecision
from .user_agents import BROWSER_USER_AGENT, SEARCH_USER_AGENT, browser_headers, search_headers

__all__ = [
    "BrowserEngine",
    "FetchedPage",
    "HttpClient",
    "PolicyChecker",
    "PolicyDecision",
    "BROWSER_USER_AGENT",
    "SEARCH_USER_AGENT",
    "browser_headers",
    "search_headers",
]
