"""
Pooled aiohttp client used for static page fetches and search engine requests.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import aiohttp
import structlog

from websift.exceptions import FetchError
from websift.observability.metrics import METRICS

from .user_agents import BROWSER_USER_AGENT

logger = structlog.get_logger(__name__)


@dataclass
class FetchedPage:
    """A successful (status < 400) HTTP response with its decoded body."""

    status: int
    url: str
    final_url: str
    headers: Dict[str, str]
    text: str
    start_ts: float
    end_ts: float

    @property
    def elapsed_ms(self) -> int:
        return int((self.end_ts - self.start_ts) * 1000)


class HttpClient:
    """
    Thin wrapper around a shared aiohttp session.

    Every failure mode (connection error, timeout, HTTP status >= 400, redirect
    limit) surfaces as FetchError so callers have one thing to catch.
    """

    def __init__(
        self,
        *,
        user_agent: str = BROWSER_USER_AGENT,
        default_timeout_ms: int = 30000,
        max_redirects: int = 5,
    ) -> None:
        self.user_agent = user_agent
        self.default_timeout_ms = default_timeout_ms
        self.max_redirects = max_redirects

        self.session: Optional[aiohttp.ClientSession] = None
        self._is_initialized = False
        self._in_flight_requests = 0

    async def initialize(self) -> None:
        """Initialize the HTTP client session."""
        if self.session is None:
            connector = aiohttp.TCPConnector(
                limit=0,
                ttl_dns_cache=30,
                use_dns_cache=True,
                keepalive_timeout=30,
            )
            self.session = aiohttp.ClientSession(connector=connector, headers={"User-Agent": self.user_agent})
            self._is_initialized = True
            logger.info("HTTP client session initialized", max_redirects=self.max_redirects)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
        self._is_initialized = False
        logger.info("HTTP client closed")

    async def __aenter__(self) -> "HttpClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _timeout(self, timeout_ms: Optional[int]) -> aiohttp.ClientTimeout:
        # 0 or None falls back to the configured default
        effective = timeout_ms or self.default_timeout_ms
        return aiohttp.ClientTimeout(total=effective / 1000)

    async def get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout_ms: Optional[int] = None,
    ) -> FetchedPage:
        """
        GET a URL and return its decoded body.

        Args:
            url: Absolute URL to fetch
            params: Optional query parameters
            headers: Request headers merged over the session defaults
            timeout_ms: Total request timeout in milliseconds (None/0 = default)

        Raises:
            FetchError: on any network, timeout, status or redirect failure
        """
        if not self._is_initialized or self.session is None:
            raise RuntimeError("HTTP client not initialized. Call initialize() first.")

        start_time = time.time()
        effective_timeout = timeout_ms or self.default_timeout_ms
        self._in_flight_requests += 1
        METRICS["fetch_in_flight"].set(self._in_flight_requests)

        try:
            async with self.session.get(
                url,
                params=params,
                headers=dict(headers) if headers else None,
                timeout=self._timeout(timeout_ms),
                allow_redirects=True,
                # aiohttp fails once the hop count reaches its limit
                max_redirects=self.max_redirects + 1,
            ) as response:
                body = await response.text(errors="replace")
                end_time = time.time()

                METRICS["fetch_responses_total"].labels(status_class=f"{response.status // 100}xx").inc()
                METRICS["fetch_latency_seconds"].observe(end_time - start_time)

                if response.status >= 400:
                    logger.info("Request returned error status", url=url, status=response.status)
                    raise FetchError(
                        f"Request failed with status code {response.status}",
                        url=url,
                        status=response.status,
                    )

                return FetchedPage(
                    status=response.status,
                    url=url,
                    final_url=str(response.url),
                    headers=dict(response.headers),
                    text=body,
                    start_ts=start_time,
                    end_ts=end_time,
                )

        except aiohttp.TooManyRedirects as e:
            logger.warning("Redirect limit exceeded", url=url, max_redirects=self.max_redirects)
            raise FetchError(f"Maximum number of redirects exceeded ({self.max_redirects})", url=url) from e
        except asyncio.TimeoutError as e:
            logger.warning("Request timed out", url=url, timeout_ms=effective_timeout)
            raise FetchError(f"timeout of {effective_timeout}ms exceeded", url=url) from e
        except aiohttp.ClientError as e:
            logger.warning("Request failed", url=url, error=str(e), error_type=type(e).__name__)
            raise FetchError(str(e) or type(e).__name__, url=url) from e
        finally:
            self._in_flight_requests -= 1
            METRICS["fetch_in_flight"].set(self._in_flight_requests)

    def get_stats(self) -> Dict[str, Any]:
        """Get current client statistics."""
        return {
            "initialized": self._is_initialized,
            "in_flight_requests": self._in_flight_requests,
            "max_redirects": self.max_redirects,
        }
