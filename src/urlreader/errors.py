"""Exception hierarchy for urlreader."""

from __future__ import annotations


class ReaderError(Exception):
    """Base exception for all urlreader failures."""


class InvalidURLError(ReaderError):
    """Raised when the input is empty or not an absolute URL."""

    def __init__(self, raw: str | None, reason: str = "Invalid URL") -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"{reason}: {raw!r}" if raw else reason)


class RateLimitedError(ReaderError):
    """Raised when a client has used up its quota for the current window."""

    def __init__(self, client_id: str, retry_after: int) -> None:
        self.client_id = client_id
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded for {client_id}, retry in {retry_after}s")


class FetchError(ReaderError):
    """Raised when neither the PDF probe nor the browser render produced content."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"Failed to fetch {url}: {message}")


class PdfParseError(ReaderError):
    """Raised when fetched PDF bytes cannot be opened as a document."""
