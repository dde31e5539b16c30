"""Interfaces between the acquirer and the network layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class HttpResponse:
    """
    A probe response whose body was downloaded.

    Attributes:
        status_code: Final status after redirects
        content: Full body bytes
        content_type: Raw Content-Type header, parameters included
        headers: Response headers
        url: Address the response was served from
    """

    status_code: int
    content: bytes
    content_type: str
    headers: dict[str, str]
    url: str


class HttpClient(Protocol):
    """Anything that can probe a URL for a given media type."""

    async def probe(
        self,
        url: str,
        media_type: str,
        *,
        timeout: float | None = None,
    ) -> HttpResponse | None:
        """Return the downloaded response if it is served as media_type, else None."""
        ...
