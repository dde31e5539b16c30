"""aiohttp client used to look for directly downloadable documents."""

from __future__ import annotations

import logging
from types import TracebackType

import aiohttp

from .protocols import HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (urlreader/1.0)"
CHUNK_SIZE = 64 * 1024


def matches_media_type(content_type: str | None, media_type: str) -> bool:
    """
    Check a Content-Type header value for a media type, case-insensitively.

    Args:
        content_type: Content-Type header value (may include parameters)
        media_type: Media type to look for, e.g. "application/pdf"

    Returns:
        True if the header names the media type
    """
    if not content_type:
        return False
    return media_type.lower() in content_type.lower()


class AsyncHttpClient:
    """
    Shared aiohttp session for media-type probes.

    Only responses whose Content-Type matches are read; everything else is
    released as soon as the headers arrive. Bodies are capped at
    max_content_size and nothing is retried.

    Example:
        async with AsyncHttpClient(default_timeout=10) as client:
            response = await client.probe("https://example.com/a.pdf", "application/pdf")
            if response is not None:
                print(len(response.content))
    """

    def __init__(
        self,
        max_content_size: int = 50 * 1024 * 1024,
        user_agent: str | None = None,
        default_timeout: float = 10.0,
    ) -> None:
        """
        Args:
            max_content_size: Largest body accepted, in bytes
            user_agent: User-Agent header for probe requests
            default_timeout: Total probe timeout in seconds when none is given
        """
        self._limit = max_content_size
        self._timeout = default_timeout
        self._headers = {"User-Agent": user_agent or DEFAULT_USER_AGENT}
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=100, ttl_dns_cache=300),
            headers=self._headers,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _read_limited(self, response: aiohttp.ClientResponse) -> bytes:
        declared = response.headers.get("Content-Length", "")
        if declared.isdigit() and int(declared) > self._limit:
            raise ValueError(f"Document too large: {declared} bytes declared, limit {self._limit}")

        body = bytearray()
        async for chunk in response.content.iter_chunked(CHUNK_SIZE):
            body.extend(chunk)
            if len(body) > self._limit:
                raise ValueError(f"Document exceeded {self._limit} bytes while downloading")
        return bytes(body)

    async def probe(
        self,
        url: str,
        media_type: str,
        *,
        timeout: float | None = None,
    ) -> HttpResponse | None:
        """
        GET a URL and download the body only if it is served as media_type.

        Args:
            url: The URL to fetch
            media_type: Media type to look for in the Content-Type header
            timeout: Total timeout in seconds (client default if None)

        Returns:
            HttpResponse with the full body on a successful match, None otherwise

        Raises:
            aiohttp.ClientError: On network errors
            asyncio.TimeoutError: When the request exceeds the timeout
            ValueError: When the body is larger than max_content_size
        """
        if self._session is None:
            raise RuntimeError("AsyncHttpClient used outside 'async with'")

        client_timeout = aiohttp.ClientTimeout(total=timeout or self._timeout)
        async with self._session.get(url, timeout=client_timeout, allow_redirects=True) as response:
            if response.status >= 400:
                logger.debug(f"Probe of {url} returned HTTP {response.status}")
                return None

            content_type = response.headers.get("Content-Type", "")
            if not matches_media_type(content_type, media_type):
                logger.debug(f"Probe of {url} returned {content_type or 'no content type'}")
                return None

            return HttpResponse(
                status_code=response.status,
                content=await self._read_limited(response),
                content_type=content_type,
                headers=dict(response.headers),
                url=str(response.url),
            )
