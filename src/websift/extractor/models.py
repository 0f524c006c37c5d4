"""
Data models for extraction requests and results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional, Tuple
from urllib.parse import urlsplit

DEFAULT_SELECTOR = "h1, h2, h3, p"
DEFAULT_TIMEOUT_MS = 30000

ExtractionMethod = Literal["static", "rendered"]


def _frozen_headers(headers: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


@dataclass(slots=True, frozen=True)
class ScrapeOptions:
    """Per-request knobs for an extraction."""

    render_javascript: bool = False
    wait_for_selector: Optional[str] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    extra_headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.timeout_ms < 0:
            raise ValueError("timeout_ms must be >= 0")
        object.__setattr__(self, "extra_headers", _frozen_headers(self.extra_headers))

    @property
    def effective_timeout_ms(self) -> int:
        """Timeout to apply; 0 means "use the default"."""
        return self.timeout_ms or DEFAULT_TIMEOUT_MS

    def with_timeout(self, timeout_ms: int) -> ScrapeOptions:
        return replace(self, timeout_ms=timeout_ms)


@dataclass(slots=True, frozen=True)
class ExtractionRequest:
    """A target URL, the selector to apply and the options to apply it with."""

    url: str
    selector: str = DEFAULT_SELECTOR
    options: ScrapeOptions = field(default_factory=ScrapeOptions)

    def __post_init__(self) -> None:
        parts = urlsplit(self.url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"URL must be absolute http(s): {self.url!r}")
        if not self.selector or not self.selector.strip():
            raise ValueError("selector must not be empty")


@dataclass(slots=True, frozen=True)
class ExtractedElement:
    """One matched element with non-empty visible text."""

    index: int
    tag: str
    text: str
    html: str
    attributes: Mapping[str, str]
    classes: Tuple[str, ...]
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("ExtractedElement text must not be empty")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "classes", tuple(self.classes))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "tag": self.tag,
            "text": self.text,
            "html": self.html,
            "attributes": dict(self.attributes),
            "classes": list(self.classes),
            "id": self.id,
        }


@dataclass(slots=True, frozen=True)
class PageMetadata:
    """Document-level metadata; every field is an empty string when absent."""

    title: str = ""
    description: str = ""
    keywords: str = ""
    charset: str = "utf-8"
    viewport: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PageMetadata:
        return cls(
            title=str(data.get("title") or "").strip(),
            description=str(data.get("description") or ""),
            keywords=str(data.get("keywords") or ""),
            charset=str(data.get("charset") or "utf-8"),
            viewport=str(data.get("viewport") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "keywords": self.keywords,
            "charset": self.charset,
            "viewport": self.viewport,
        }


@dataclass(slots=True, frozen=True)
class ExtractionResult:
    """Result of one extraction request."""

    url: str
    method: ExtractionMethod
    selector: str
    elements: Tuple[ExtractedElement, ...]
    metadata: PageMetadata
    duration_ms: int = 0

    @property
    def found(self) -> int:
        return len(self.elements)

    def with_duration(self, duration_ms: int) -> ExtractionResult:
        return replace(self, duration_ms=duration_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "method": self.method,
            "selector": self.selector,
            "found": self.found,
            "data": [element.to_dict() for element in self.elements],
            "metadata": self.metadata.to_dict(),
            "durationMs": self.duration_ms,
        }


@dataclass(slots=True, frozen=True)
class ElementSnapshot:
    """Raw view of a matched element before text filtering."""

    index: int
    tag: str
    text: str
    html: str
    attributes: Dict[str, str]
    class_name: str = ""
    id: Optional[str] = None

    def to_element(self) -> Optional[ExtractedElement]:
        """Return the normalized element, or None when its trimmed text is empty."""
        text = self.text.strip()
        if not text:
            return None
        return ExtractedElement(
            index=self.index,
            tag=self.tag.lower(),
            text=text,
            html=self.html,
            attributes=self.attributes,
            classes=tuple(self.class_name.split()),
            id=self.id or None,
        )
