"""
Queryable document backends and the extraction logic shared by both.

SoupDocument answers selector queries against parsed source markup;
LiveDocument answers them against a rendered page's DOM, so it sees
script-generated content. Both yield ElementSnapshot values which
collect_elements() normalizes identically.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import structlog
from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from soupsieve import SelectorSyntaxError

from websift.exceptions import RenderError, SelectorError

from .models import ElementSnapshot, ExtractedElement, ExtractionMethod, ExtractionResult, PageMetadata
from .protocols import QueryableDocument

logger = structlog.get_logger(__name__)

STRIPPED_TAGS = ("script", "style", "noscript")

_SELECT_SCRIPT = """
(selector) => Array.from(document.querySelectorAll(selector)).map((el, index) => ({
    index,
    tag: el.tagName.toLowerCase(),
    text: el.textContent || "",
    html: el.innerHTML,
    attributes: Object.fromEntries(Array.from(el.attributes).map((a) => [a.name, a.value])),
    className: el.getAttribute("class") || "",
    id: el.id || null,
}))
"""

_METADATA_SCRIPT = """
() => {
    const meta = (selector, attr) => {
        const el = document.querySelector(selector);
        return (el && el.getAttribute(attr)) || "";
    };
    return {
        title: document.title || "",
        description: meta('meta[name="description"]', "content"),
        keywords: meta('meta[name="keywords"]', "content"),
        charset: meta("meta[charset]", "charset") || "utf-8",
        viewport: meta('meta[name="viewport"]', "content"),
    };
}
"""


def parse_html(html: str, parser: str = "html.parser") -> BeautifulSoup:
    """Parse markup and drop script/style/noscript subtrees."""
    soup = BeautifulSoup(html, parser)
    for tag in soup.find_all(list(STRIPPED_TAGS)):
        # nested matches are already gone with their ancestor
        if not tag.decomposed:
            tag.decompose()
    return soup


def _attribute_map(tag: Tag) -> Dict[str, str]:
    # bs4 keeps multi-valued attributes (class, rel, ...) as lists
    return {name: " ".join(value) if isinstance(value, list) else str(value) for name, value in tag.attrs.items()}


def _meta_content(soup: BeautifulSoup, selector: str, attr: str) -> str:
    tag = soup.select_one(selector)
    if tag is None:
        return ""
    value = tag.get(attr)
    if isinstance(value, list):
        value = " ".join(value)
    return value or ""


class SoupDocument:
    """QueryableDocument over a BeautifulSoup tree."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup

    @classmethod
    def from_html(cls, html: str) -> SoupDocument:
        return cls(parse_html(html))

    async def select(self, selector: str) -> List[ElementSnapshot]:
        try:
            matches = self.soup.select(selector)
        except SelectorSyntaxError as e:
            raise SelectorError(f"Invalid selector {selector!r}: {e}") from e

        snapshots = []
        for index, tag in enumerate(matches):
            attributes = _attribute_map(tag)
            snapshots.append(
                ElementSnapshot(
                    index=index,
                    tag=tag.name,
                    text=tag.get_text(),
                    html=tag.decode_contents(),
                    attributes=attributes,
                    class_name=attributes.get("class", ""),
                    id=attributes.get("id"),
                )
            )
        return snapshots

    async def metadata(self) -> PageMetadata:
        title_tag = self.soup.find("title")
        return PageMetadata(
            title=title_tag.get_text().strip() if title_tag else "",
            description=_meta_content(self.soup, 'meta[name="description"]', "content"),
            keywords=_meta_content(self.soup, 'meta[name="keywords"]', "content"),
            charset=_meta_content(self.soup, "meta[charset]", "charset") or "utf-8",
            viewport=_meta_content(self.soup, 'meta[name="viewport"]', "content"),
        )


class LiveDocument:
    """QueryableDocument over a rendered Playwright page."""

    def __init__(self, page: Page) -> None:
        self.page = page

    async def select(self, selector: str) -> List[ElementSnapshot]:
        try:
            raw: List[Dict[str, Any]] = await self.page.evaluate(_SELECT_SCRIPT, selector)
        except PlaywrightError as e:
            raise RenderError(f"Selector evaluation failed for {selector!r}: {e}") from e

        return [
            ElementSnapshot(
                index=item["index"],
                tag=item["tag"],
                text=item.get("text") or "",
                html=item.get("html") or "",
                attributes=dict(item.get("attributes") or {}),
                class_name=item.get("className") or "",
                id=item.get("id"),
            )
            for item in raw
        ]

    async def metadata(self) -> PageMetadata:
        try:
            raw = await self.page.evaluate(_METADATA_SCRIPT)
        except PlaywrightError as e:
            raise RenderError(f"Metadata evaluation failed: {e}") from e
        return PageMetadata.from_mapping(raw)


async def collect_elements(document: QueryableDocument, selector: str) -> Tuple[ExtractedElement, ...]:
    """Run ``selector`` and keep only elements with non-empty trimmed text."""
    snapshots = await document.select(selector)
    elements = tuple(element for element in (s.to_element() for s in snapshots) if element is not None)
    if len(elements) < len(snapshots):
        logger.debug("Dropped elements with empty text", selector=selector, dropped=len(snapshots) - len(elements))
    return elements


async def build_result(
    document: QueryableDocument,
    *,
    url: str,
    selector: str,
    method: ExtractionMethod,
) -> ExtractionResult:
    """Extract elements and metadata from ``document`` into an ExtractionResult."""
    elements = await collect_elements(document, selector)
    metadata = await document.metadata()
    return ExtractionResult(
        url=url,
        method=method,
        selector=selector,
        elements=elements,
        metadata=metadata,
    )
