"""HTML to Markdown serialization."""

from __future__ import annotations

import logging
import re
import uuid

import html2text
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_LANGUAGE_PREFIXES = ("language-", "lang-")


def _code_language(pre) -> str:
    code = pre.find("code")
    classes = (code if code is not None else pre).get("class") or []
    for name in classes:
        if name.startswith(_LANGUAGE_PREFIXES):
            return name.split("-", 1)[1]
    return ""


class HtmlToMarkdown:
    """
    Converts HTML content to clean Markdown.

    Uses html2text with unwrapped lines and inline links. Preformatted
    blocks are lifted out of the tree before conversion and written back
    as fenced code with their text untouched, so html2text never sees or
    reindents them.

    Example:
        converter = HtmlToMarkdown()
        markdown = converter.convert("<h1>Title</h1><p>Body</p>")
    """

    def __init__(
        self,
        body_width: int = 0,
        inline_links: bool = True,
        wrap_links: bool = False,
        ignore_images: bool = False,
        ignore_tables: bool = False,
        protect_links: bool = True,
        unicode_snob: bool = True,
    ):
        """
        Initialize the Markdown converter.

        Args:
            body_width: Max line width (0 = no wrapping)
            inline_links: Use inline [text](url) vs reference style
            wrap_links: Wrap long links
            ignore_images: Skip image conversion
            ignore_tables: Skip table conversion
            protect_links: Prevent link mangling
            unicode_snob: Use Unicode chars where possible
        """
        self._body_width = body_width
        self._inline_links = inline_links
        self._wrap_links = wrap_links
        self._ignore_images = ignore_images
        self._ignore_tables = ignore_tables
        self._protect_links = protect_links
        self._unicode_snob = unicode_snob

    def _build_converter(self) -> html2text.HTML2Text:
        # HTML2Text keeps parser state, so each conversion gets its own instance
        converter = html2text.HTML2Text()
        converter.body_width = self._body_width
        converter.inline_links = self._inline_links
        converter.wrap_links = self._wrap_links
        converter.protect_links = self._protect_links
        converter.ignore_images = self._ignore_images
        converter.ignore_tables = self._ignore_tables
        converter.unicode_snob = self._unicode_snob
        converter.default_image_alt = ""
        converter.single_line_break = False
        return converter

    def _clean_prose(self, text: str) -> str:
        text = "\n".join(line.rstrip() for line in text.split("\n"))
        return re.sub(r"\n{3,}", "\n\n", text)

    def _lift_code_blocks(self, soup: BeautifulSoup, token: str) -> list[str]:
        """Replace each outermost <pre> with a placeholder paragraph and return the fences."""
        fences: list[str] = []
        for pre in soup.find_all("pre"):
            if pre.find_parent("pre") is not None:
                continue
            code = pre.get_text().strip("\n")
            fences.append(f"```{_code_language(pre)}\n{code}\n```")

            placeholder = soup.new_tag("p")
            placeholder.string = f"{token}{len(fences) - 1}"
            pre.replace_with(placeholder)
        return fences

    def _restore_code_blocks(self, markdown: str, token: str, fences: list[str]) -> str:
        # Adjacent placeholders collapse into one run so fences stay one blank line apart
        run = re.compile(rf"\s*(?:{token}\d+\s*)+")

        def restore(match: re.Match[str]) -> str:
            indices = re.findall(rf"{token}(\d+)", match.group(0))
            return "\n\n" + "\n\n".join(fences[int(i)] for i in indices) + "\n\n"

        return run.sub(restore, markdown)

    def convert(self, html: str, base_url: str | None = None) -> str:
        """
        Convert HTML to Markdown.

        Args:
            html: HTML content string
            base_url: Optional source URL for resolving relative links

        Returns:
            Trimmed Markdown string
        """
        try:
            soup = BeautifulSoup(html, "html.parser")
            token = f"CODEBLOCK{uuid.uuid4().hex}X"
            fences = self._lift_code_blocks(soup, token)

            converter = self._build_converter()
            if base_url:
                converter.baseurl = base_url
            markdown = self._clean_prose(converter.handle(str(soup)))
            if fences:
                markdown = self._restore_code_blocks(markdown, token, fences)
            return markdown.strip()

        except Exception as e:
            logger.error(f"Failed to convert HTML to Markdown: {e}")
            # Plain text keeps the content readable
            soup = BeautifulSoup(html, "html.parser")
            text: str = soup.get_text(separator="\n")
            return self._clean_prose(text).strip()
