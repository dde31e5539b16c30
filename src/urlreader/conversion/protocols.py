"""Protocol definitions for content conversion."""

from typing import Optional, Protocol

from .extractor import ExtractionResult


class ContentExtractor(Protocol):
    """
    Protocol for extracting the readable content of an HTML document.

    Implementations must not raise: failures are reported as a skipped
    ExtractionResult so the caller can fall back to the whole document.
    """

    def extract(self, markup: str, base_url: Optional[str] = None) -> ExtractionResult:
        ...


class MarkdownConverter(Protocol):
    """Protocol for serializing an HTML fragment to Markdown."""

    def convert(self, html: str, base_url: Optional[str] = None) -> str:
        ...
