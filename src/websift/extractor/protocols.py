"""
Protocols for the two extraction backends.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .models import ElementSnapshot, ExtractionRequest, ExtractionResult, PageMetadata


@runtime_checkable
class QueryableDocument(Protocol):
    """A document that can answer selector queries, parsed or live."""

    async def select(self, selector: str) -> List[ElementSnapshot]:
        """Return every element matching ``selector`` in document order."""
        ...

    async def metadata(self) -> PageMetadata:
        """Return title and standard <meta> values."""
        ...


@runtime_checkable
class Extractor(Protocol):
    """Pluggable fetch-and-extract strategy."""

    name: str

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        """Fetch ``request.url`` and extract the elements matching its selector.

        Args:
            request: The extraction request

        Returns:
            ExtractionResult with method set to this extractor's name
        """
        ...
