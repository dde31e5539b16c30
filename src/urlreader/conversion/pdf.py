"""PDF to Markdown conversion: per-page text with page headings."""

from __future__ import annotations

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..errors import PdfParseError

logger = logging.getLogger(__name__)


def page_heading(number: int) -> str:
    """Markdown heading that introduces page ``number`` (1-based)."""
    return f"# Page {number}"


class PdfToMarkdown:
    """
    Converts PDF bytes to Markdown.

    Text is taken from each page's content stream in order, keeping the
    line breaks the layout emits. No layout, image or table reconstruction
    is attempted. Every page gets a ``# Page <n>`` heading, even when it has
    no extractable text.

    Example:
        converter = PdfToMarkdown()
        markdown = converter.convert(pdf_bytes)
    """

    def _open(self, data: bytes) -> PdfReader:
        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted:
                # Many PDFs are "encrypted" with an empty user password
                reader.decrypt("")
            # Force the page tree to load so a broken document fails here
            _ = len(reader.pages)
        except (PyPdfError, OSError, ValueError, KeyError, TypeError, NotImplementedError) as e:
            raise PdfParseError(f"Could not open PDF document: {e}") from e
        return reader

    def _page_text(self, reader: PdfReader, index: int) -> str:
        try:
            return reader.pages[index].extract_text() or ""
        except Exception as e:
            # pypdf surfaces damaged page content as arbitrary exception types
            logger.warning(f"Could not extract text from PDF page {index + 1}: {e}")
            return ""

    def convert(self, data: bytes) -> str:
        """
        Convert a PDF document to Markdown.

        Args:
            data: Raw PDF bytes

        Returns:
            Trimmed Markdown with one heading per page, in page order

        Raises:
            PdfParseError: If the document cannot be opened
        """
        reader = self._open(data)
        page_count = len(reader.pages)

        parts = []
        for index in range(page_count):
            text = self._page_text(reader, index)
            parts.append(f"\n\n{page_heading(index + 1)}\n\n{text}")

        logger.debug(f"Converted PDF with {page_count} pages")
        return "".join(parts).strip()

    to_markdown = convert
