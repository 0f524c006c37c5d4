"""
WebSift Extraction Module - dual-strategy selector extraction.

1. StaticExtractor: single HTTP exchange parsed with BeautifulSoup
2. RenderedExtractor: headless Chromium render queried through the live DOM
3. ExtractionOrchestrator: static first, one rendered fallback, or rendered only
   when the caller asks for JavaScript

Both strategies query a QueryableDocument and share the same element and
metadata normalization.
"""

from .documents import LiveDocument, SoupDocument, build_result, collect_elements
from .manager import ExtractionOrchestrator
from .models import (
    DEFAULT_SELECTOR,
    ElementSnapshot,
    ExtractedElement,
    ExtractionRequest,
    ExtractionResult,
    PageMetadata,
    ScrapeOptions,
)
from .protocols import Extractor, QueryableDocument
from .rendered_extractor import RenderedExtractor
from .soup_extractor import StaticExtractor

__all__ = [
    "DEFAULT_SELECTOR",
    "ElementSnapshot",
    "ExtractedElement",
    "ExtractionOrchestrator",
    "ExtractionRequest",
    "ExtractionResult",
    "Extractor",
    "LiveDocument",
    "PageMetadata",
    "QueryableDocument",
    "RenderedExtractor",
    "ScrapeOptions",
    "SoupDocument",
    "StaticExtractor",
    "build_result",
    "collect_elements",
]
