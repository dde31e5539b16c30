"""HTML to Markdown transformation: readable-content extraction plus serialization."""

from __future__ import annotations

import logging
from typing import Optional

from .extractor import ExtractionResult, ReadableContentExtractor
from .markdown import HtmlToMarkdown
from .protocols import ContentExtractor, MarkdownConverter

logger = logging.getLogger(__name__)


class HtmlTransformer:
    """
    Turns rendered page markup into Markdown.

    Extraction is best-effort: when the readable-content heuristic finds
    nothing, the whole parsed document is serialized instead.

    Example:
        transformer = HtmlTransformer()
        markdown = transformer.to_markdown(html, base_url="https://example.com/post")
    """

    def __init__(
        self,
        extractor: Optional[ContentExtractor] = None,
        converter: Optional[MarkdownConverter] = None,
    ):
        """
        Args:
            extractor: Readable-content extractor (uses default if None)
            converter: Markdown serializer (uses default if None)
        """
        self._extractor = extractor or ReadableContentExtractor()
        self._converter = converter or HtmlToMarkdown()

    def transform(self, markup: str, base_url: Optional[str] = None) -> tuple[str, ExtractionResult]:
        """
        Convert markup and report how extraction went. Never raises.

        Returns:
            Tuple of (trimmed Markdown, extraction result)
        """
        markup = markup or ""
        result = self._extractor.extract(markup, base_url)
        if not result.is_extracted:
            logger.info(f"Extraction skipped ({result.skip_reason}), converting full document")

        markdown = self._converter.convert(result.fallback_to(markup), base_url).strip()
        return markdown, result

    def to_markdown(self, markup: str, base_url: Optional[str] = None) -> str:
        """
        Convert markup to trimmed Markdown. Never raises.

        Args:
            markup: Serialized HTML document or fragment
            base_url: Optional source URL for resolving relative links

        Returns:
            Markdown text (possibly empty)
        """
        markdown, _ = self.transform(markup, base_url)
        return markdown


def html_to_markdown(markup: str, base_url: Optional[str] = None) -> str:
    """Convert markup with the default extractor and converter."""
    return HtmlTransformer().to_markdown(markup, base_url)
