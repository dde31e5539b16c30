"""Readable-content extraction from rendered HTML pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from readability import Document
from readability.readability import Unparseable

logger = logging.getLogger(__name__)

# Elements that typically contain the article body
CONTENT_SELECTORS = [
    "article",
    "main",
    '[role="main"]',
    '[itemprop="articleBody"]',
    ".post-content",
    ".article-content",
    ".entry-content",
    ".article-body",
    ".content",
    ".main-content",
    "#content",
    "#main-content",
]

# Elements to remove (navigation, ads, etc.)
REMOVE_SELECTORS = [
    "nav",
    "header",
    "footer",
    "aside",
    "form",
    ".nav",
    ".navbar",
    ".sidebar",
    ".footer",
    ".header",
    ".menu",
    ".advertisement",
    ".ads",
    ".ad",
    ".social-share",
    ".share",
    ".comments",
    ".related-posts",
    ".newsletter",
    ".cookie-banner",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
    '[role="complementary"]',
    '[aria-hidden="true"]',
    "script",
    "style",
    "noscript",
    "iframe",
    "svg",
    "template",
]

# Block containers scored by the paragraph text they hold
SCORABLE_PARENTS = {"div", "section", "td", "article", "main", "body"}

KEEP_ATTRIBUTES = {"href", "src", "alt", "title", "class", "colspan", "rowspan"}


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome of readable-content extraction.

    Either carries the extracted fragment, or records why extraction was
    skipped. ``document`` holds the whole parsed document (when parsing
    succeeded) so callers can fall back to it deterministically.
    """

    content: Optional[str] = None
    skip_reason: Optional[str] = None
    document: Optional[str] = None

    @staticmethod
    def extracted(content: str, document: Optional[str] = None) -> ExtractionResult:
        """Create a result carrying an extracted fragment."""
        return ExtractionResult(content=content, document=document)

    @staticmethod
    def skipped(reason: str, document: Optional[str] = None) -> ExtractionResult:
        """Create a result recording that extraction produced nothing usable."""
        return ExtractionResult(skip_reason=reason, document=document)

    @property
    def is_extracted(self) -> bool:
        return bool(self.content)

    def fallback_to(self, markup: str) -> str:
        """Return the extracted fragment, else the parsed document, else markup."""
        if self.content:
            return self.content
        if self.document:
            return self.document
        return markup


def parse_document(markup: str) -> BeautifulSoup:
    """
    Parse markup into a document tree that always has a root element.

    Fragments (no ``<html>`` element) are wrapped in a minimal document
    and parsed again.
    """
    soup = BeautifulSoup(markup, "html.parser")
    if soup.find("html") is None:
        soup = BeautifulSoup(f"<html><body>{markup}</body></html>", "html.parser")
    return soup


def _link_density(element: Tag) -> float:
    text_length = len(element.get_text(strip=True))
    if not text_length:
        return 1.0
    link_length = sum(len(a.get_text(strip=True)) for a in element.find_all("a"))
    return min(1.0, link_length / text_length)


def _paragraph_score(element: Tag) -> float:
    """Paragraph text held by an element, discounted by how much of it is links."""
    paragraph_length = sum(len(p.get_text(strip=True)) for p in element.find_all(["p", "pre"]))
    return paragraph_length * (1.0 - _link_density(element))


class ReadableContentExtractor:
    """
    Identifies the main article content of an HTML document.

    The readability algorithm (readability-lxml) picks the article first.
    When it fails or finds no text, every well-known content container and
    every paragraph-holding block is scored by its non-link paragraph text
    and the best one wins. Navigation, ads, and other boilerplate are
    stripped from the chosen fragment.

    Example:
        extractor = ReadableContentExtractor()
        result = extractor.extract(html, base_url="https://example.com/post")
        fragment = result.fallback_to(html)
    """

    def __init__(
        self,
        content_selectors: Optional[list[str]] = None,
        remove_selectors: Optional[list[str]] = None,
        min_content_length: int = 100,
        use_readability: bool = True,
    ):
        """
        Initialize the content extractor.

        Args:
            content_selectors: CSS selectors for main content (overrides defaults)
            remove_selectors: CSS selectors for elements to remove (extends defaults)
            min_content_length: Characters of text a selector match needs to be a candidate
            use_readability: Try readability-lxml before the selector heuristic
        """
        self._content_selectors = content_selectors or CONTENT_SELECTORS
        self._remove_selectors = list(REMOVE_SELECTORS)
        if remove_selectors:
            self._remove_selectors.extend(remove_selectors)
        self._min_content_length = min_content_length
        self._use_readability = use_readability

    def _readability_fragment(self, document: str) -> Optional[BeautifulSoup]:
        """Run readability over the document; None when it cannot decide."""
        try:
            summary = Document(document).summary(html_partial=True)
        except (Unparseable, ValueError) as e:
            logger.debug(f"Readability could not parse document: {e}")
            return None

        fragment = BeautifulSoup(summary, "html.parser")
        if not fragment.get_text(strip=True):
            return None
        return fragment

    def _candidates(self, soup: BeautifulSoup) -> list[Tag]:
        candidates: list[Tag] = []
        for selector in self._content_selectors:
            for element in soup.select(selector):
                if len(element.get_text(strip=True)) >= self._min_content_length:
                    candidates.append(element)

        for paragraph in soup.find_all(["p", "pre"]):
            parent = paragraph.parent
            if isinstance(parent, Tag) and parent.name in SCORABLE_PARENTS:
                candidates.append(parent)
        return candidates

    def _find_main_content(self, soup: BeautifulSoup) -> Optional[Tag]:
        """Find the main content element."""
        best: Optional[Tag] = None
        best_key: tuple[float, int] = (0.0, 0)
        seen: set[int] = set()
        for element in self._candidates(soup):
            if id(element) in seen:
                continue
            seen.add(id(element))
            # Equal scores favour the tighter container
            key = (_paragraph_score(element), -len(element.get_text(strip=True)))
            if best is None or key > best_key:
                best, best_key = element, key

        if best is not None and best_key[0] > 0:
            return best

        body = soup.find("body")
        return body if isinstance(body, Tag) else None

    def _remove_unwanted(self, element: BeautifulSoup) -> None:
        """Remove navigation, ads, and other unwanted elements."""
        for selector in self._remove_selectors:
            for el in element.select(selector):
                el.decompose()

    def _clean_attributes(self, element: BeautifulSoup) -> None:
        """Remove presentation and scripting attributes."""
        for tag in element.find_all(True):
            for attr in [attr for attr in tag.attrs if attr not in KEEP_ATTRIBUTES]:
                del tag[attr]

    def _resolve_links(self, element: BeautifulSoup, base_url: str) -> None:
        """Convert relative URLs to absolute URLs."""
        for tag in element.find_all("a", href=True):
            href = tag["href"]
            if href.startswith("#"):
                continue
            if not href.startswith(("http://", "https://", "//", "mailto:", "tel:")):
                tag["href"] = urljoin(base_url, href)

        for tag in element.find_all(src=True):
            src = tag["src"]
            if not src.startswith(("http://", "https://", "//", "data:")):
                tag["src"] = urljoin(base_url, src)

    def _select_fragment(self, soup: BeautifulSoup) -> Optional[BeautifulSoup]:
        if self._use_readability:
            fragment = self._readability_fragment(str(soup))
            if fragment is not None:
                return fragment

        main_content = self._find_main_content(soup)
        if main_content is None:
            return None
        # Work on a copy so the parsed document stays intact for fallback
        return BeautifulSoup(str(main_content), "html.parser")

    def _extract_fragment(self, soup: BeautifulSoup, base_url: Optional[str]) -> str:
        content = self._select_fragment(soup)
        if content is None:
            return ""

        self._remove_unwanted(content)
        self._clean_attributes(content)
        if base_url:
            self._resolve_links(content, base_url)

        if not content.get_text(strip=True):
            return ""
        return str(content)

    def extract(self, markup: str, base_url: Optional[str] = None) -> ExtractionResult:
        """
        Extract the readable content of a document.

        Never raises: parser or heuristic failures produce a skipped result.

        Args:
            markup: Serialized HTML document or fragment
            base_url: Optional source URL for resolving relative links

        Returns:
            ExtractionResult with the fragment or a skip reason
        """
        try:
            soup = parse_document(markup)
        except Exception as e:
            logger.warning(f"Could not parse document for extraction: {e}")
            return ExtractionResult.skipped(f"parse failed: {e}")

        document = str(soup)
        try:
            fragment = self._extract_fragment(soup, base_url)
        except Exception as e:
            logger.warning(f"Readable-content extraction failed: {e}")
            return ExtractionResult.skipped(f"extraction failed: {e}", document=document)

        if not fragment:
            logger.info(f"No readable content found{f' for {base_url}' if base_url else ''}")
            return ExtractionResult.skipped("no readable content", document=document)

        return ExtractionResult.extracted(fragment, document=document)
