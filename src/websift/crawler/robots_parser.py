"""
Advisory robots.txt inspection.

The check never blocks an extraction: a disallowing rule is logged as a
warning and reported in the returned PolicyDecision, and an unreachable
robots.txt means the site is treated as unrestricted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

import httpx
import structlog
from httpx import AsyncClient, HTTPError

from websift.observability.metrics import METRICS

from .user_agents import BROWSER_USER_AGENT

logger = structlog.get_logger(__name__)

PolicyStatus = Literal["allowed", "disallowed", "unreachable"]


@dataclass(slots=True, frozen=True)
class PolicyDecision:
    """Outcome of one robots.txt check."""

    url: str
    robots_url: str
    status: PolicyStatus
    matched_rule: Optional[str] = None

    @property
    def disallowed(self) -> bool:
        return self.status == "disallowed"


def robots_url_for(url: str) -> str:
    """Return the robots.txt URL on the same origin as ``url``."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, "/robots.txt", "", ""))


def find_disallow_rule(robots_txt: str, path: str, agent_tokens: Sequence[str]) -> Optional[str]:
    """
    Return the first Disallow path that covers ``path`` in a section applying
    to any of ``agent_tokens``, or None.

    Matching is case-insensitive. A section applies when its user-agent value
    contains one of the tokens; ``Disallow: /`` covers everything and an empty
    Disallow covers nothing.
    """
    target = (path or "/").lower()
    in_applicable_section = False

    for raw_line in robots_txt.splitlines():
        line = raw_line.strip().lower()

        if line.startswith("user-agent:"):
            agent = line[len("user-agent:"):].strip()
            in_applicable_section = any(token in agent for token in agent_tokens)
            continue

        if in_applicable_section and line.startswith("disallow:"):
            rule = line[len("disallow:"):].strip()
            if rule == "/" or (rule and target.startswith(rule)):
                return rule

    return None


class PolicyChecker:
    """
    Fetches and interprets a site's robots.txt.

    Args:
        client: An optional httpx.AsyncClient. If not provided, one is created
                and closed by close().
        user_agent: User-Agent sent with the robots.txt request.
        timeout_seconds: Timeout for the robots.txt fetch.
        agent_tokens: User-agent tokens whose sections apply to us.
    """

    def __init__(
        self,
        client: AsyncClient | None = None,
        *,
        user_agent: str = BROWSER_USER_AGENT,
        timeout_seconds: float = 5.0,
        agent_tokens: Sequence[str] = ("*", "educational"),
        enabled: bool = True,
    ) -> None:
        self._owns_client = client is None
        self._client = client or AsyncClient(follow_redirects=True)
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.agent_tokens = tuple(agent_tokens)
        self.enabled = enabled

    async def _fetch_robots_txt(self, robots_url: str) -> str | None:
        """Return robots.txt content, or None when it cannot be used."""
        try:
            response = await self._client.get(
                robots_url,
                timeout=self.timeout_seconds,
                headers={"User-Agent": self.user_agent},
            )
        except (HTTPError, httpx.InvalidURL) as e:
            logger.debug("Could not access robots.txt", robots_url=robots_url, error=str(e))
            return None

        if response.status_code != 200:
            logger.debug("No usable robots.txt", robots_url=robots_url, status=response.status_code)
            return None

        return response.text

    async def check(self, url: str) -> PolicyDecision:
        """
        Check ``url`` against its site's robots.txt.

        Never raises; the returned decision is advisory and callers must not
        use it to gate extraction.
        """
        robots_url = robots_url_for(url)

        if not self.enabled:
            return PolicyDecision(url=url, robots_url=robots_url, status="allowed")

        content = await self._fetch_robots_txt(robots_url)
        if content is None:
            return PolicyDecision(url=url, robots_url=robots_url, status="unreachable")

        rule = find_disallow_rule(content, urlsplit(url).path, self.agent_tokens)
        if rule is None:
            return PolicyDecision(url=url, robots_url=robots_url, status="allowed")

        METRICS["robots_disallowed_total"].inc()
        logger.warning("Robots.txt disallows scraping", url=url, rule=rule)
        return PolicyDecision(url=url, robots_url=robots_url, status="disallowed", matched_rule=rule)

    async def close(self) -> None:
        """Closes the underlying HTTP client if it was created internally."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()


__all__ = ["PolicyChecker", "PolicyDecision", "find_disallow_rule", "robots_url_for"]
