"""Request-scoped data model: resolved targets and acquired content."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union
from urllib.parse import urlsplit


class ContentKind(str, Enum):
    """Kinds of content the acquirer can hand to a transformer."""

    HTML = "html"
    PDF = "pdf"


@dataclass(frozen=True)
class TargetUrl:
    """
    A validated absolute URL.

    Always carries a scheme and a host. Instances are created by
    UrlResolver and never mutated.
    """

    url: str

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme

    @property
    def host(self) -> str:
        return urlsplit(self.url).hostname or ""

    def __str__(self) -> str:
        return self.url


@dataclass(frozen=True)
class HtmlContent:
    """Serialized document markup captured from a rendered page."""

    markup: str
    kind: ContentKind = field(default=ContentKind.HTML, init=False)


@dataclass(frozen=True)
class PdfContent:
    """Raw bytes of a document served with a PDF media type."""

    data: bytes = field(repr=False)
    kind: ContentKind = field(default=ContentKind.PDF, init=False)

    @property
    def size(self) -> int:
        return len(self.data)


AcquiredContent = Union[HtmlContent, PdfContent]
