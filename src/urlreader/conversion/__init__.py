"""Content conversion for urlreader (HTML and PDF to Markdown)."""

from .extractor import ExtractionResult, ReadableContentExtractor, parse_document
from .html import HtmlTransformer, html_to_markdown
from .markdown import HtmlToMarkdown
from .pdf import PdfToMarkdown, page_heading
from .protocols import ContentExtractor, MarkdownConverter

__all__ = [
    # Protocols
    "ContentExtractor",
    "MarkdownConverter",
    # Implementations
    "ExtractionResult",
    "ReadableContentExtractor",
    "HtmlToMarkdown",
    "HtmlTransformer",
    "PdfToMarkdown",
    # Helpers
    "html_to_markdown",
    "page_heading",
    "parse_document",
]
