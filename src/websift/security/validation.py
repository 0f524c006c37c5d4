"""
URL validation for the HTTP and CLI boundaries.
"""

from __future__ import annotations

from typing import Dict, List
from urllib.parse import SplitResult, urlsplit

from pydantic import BaseModel, Field


class URLValidationError(ValueError):
    """Raised when URL validation fails."""

    pass


class URLValidationRules(BaseModel):
    """Rules for URLs accepted as extraction targets."""

    allowed_schemes: List[str] = Field(default=["http", "https"])
    blocked_hosts: List[str] = Field(default_factory=list)
    max_url_length: int = 2048


def parse_url(url: str) -> SplitResult:
    """
    Split ``url`` into its components, requiring a scheme and a host.

    Raises:
        URLValidationError: If the URL is not absolute
    """
    try:
        parsed = urlsplit(url.strip())
        # .port raises on out-of-range or non-numeric ports
        _ = parsed.port
    except (ValueError, AttributeError) as e:
        raise URLValidationError(f"Invalid URL format: {e}") from e

    if not parsed.scheme or not parsed.netloc:
        raise URLValidationError(f"Invalid URL format: {url!r}")
    return parsed


class URLValidator:
    """Checks extraction targets against URLValidationRules."""

    def __init__(self, rules: URLValidationRules | None = None) -> None:
        self.rules = rules or URLValidationRules()

    def validate_url(self, url: str) -> str:
        """
        Validate a URL and return it with surrounding whitespace removed.

        Raises:
            URLValidationError: If the URL is malformed or not allowed
        """
        if len(url) > self.rules.max_url_length:
            raise URLValidationError(f"URL exceeds maximum length of {self.rules.max_url_length}")

        parsed = parse_url(url)

        if parsed.scheme.lower() not in self.rules.allowed_schemes:
            raise URLValidationError(f"Invalid URL scheme: {parsed.scheme}")

        hostname = parsed.hostname or ""
        if any(blocked in hostname for blocked in self.rules.blocked_hosts):
            raise URLValidationError(f"Blocked host: {hostname}")

        return url.strip()


def describe_url(url: str) -> Dict[str, str]:
    """
    Break a URL into protocol, hostname and pathname.

    The protocol keeps its trailing colon (``"https:"``) and an empty path is
    reported as ``"/"``.

    Raises:
        URLValidationError: If the URL is not absolute
    """
    parsed = parse_url(url)
    return {
        "protocol": f"{parsed.scheme.lower()}:",
        "hostname": parsed.hostname or "",
        "pathname": parsed.path or "/",
    }


_default_validator = URLValidator()


def validate_url(url: str) -> str:
    """Validate a URL using the default rules."""
    return _default_validator.validate_url(url)
