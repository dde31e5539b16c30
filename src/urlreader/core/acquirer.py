"""Content acquisition: PDF probe first, headless browser render second."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

import aiohttp

from ..errors import FetchError
from ..http.protocols import HttpClient
from ..models.content import AcquiredContent, HtmlContent, PdfContent, TargetUrl
from ..models.events import EventEmitter, EventType, ReaderEvent

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

# Failures that mean "not a PDF" rather than a failed request
PROBE_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ConnectionError,
    OSError,
    ValueError,
)


class PageRenderer(Protocol):
    """Protocol for renderers that return the serialized DOM of a page."""

    async def render(self, url: str) -> str:
        ...


class ContentAcquirer:
    """
    Retrieves raw content for a target URL.

    Strategies are tried strictly in order and never in parallel:
    1. A direct GET probe; if the response is served as a PDF its bytes
       are returned and the browser is never started.
    2. Otherwise a headless browser renders the page and its markup is
       returned.

    Example:
        acquirer = ContentAcquirer(http_client, BrowserRenderer())
        content = await acquirer.acquire(target)
    """

    def __init__(
        self,
        http_client: HttpClient,
        renderer: PageRenderer,
        probe_timeout: float = 10.0,
    ) -> None:
        """
        Args:
            http_client: Client used for the PDF probe
            renderer: Browser renderer for everything that is not a PDF
            probe_timeout: Seconds before the probe is abandoned
        """
        self._http_client = http_client
        self._renderer = renderer
        self._probe_timeout = probe_timeout

    async def probe_pdf(self, target: TargetUrl) -> Optional[PdfContent]:
        """
        Fetch the target directly and return it if it is a PDF.

        Any network failure, error status or non-PDF content type yields
        None; the probe never fails the request.
        """
        url = str(target)
        try:
            response = await self._http_client.probe(url, PDF_MEDIA_TYPE, timeout=self._probe_timeout)
        except PROBE_ERRORS as e:
            logger.debug(f"PDF probe for {url} failed, treating as not a PDF: {e!r}")
            return None

        if response is None:
            return None
        if response.status_code >= 400:
            logger.debug(f"PDF probe for {url} returned HTTP {response.status_code}, ignoring body")
            return None

        logger.info(f"Detected PDF at {url} ({len(response.content)} bytes)")
        return PdfContent(response.content)

    async def acquire(
        self,
        target: TargetUrl,
        emit: Optional[EventEmitter] = None,
    ) -> AcquiredContent:
        """
        Acquire content for a target.

        Args:
            target: Resolved target URL
            emit: Optional event emitter

        Returns:
            PdfContent when the probe finds a PDF, HtmlContent otherwise

        Raises:
            FetchError: If the browser render fails
        """
        url = str(target)

        pdf = await self.probe_pdf(target)
        if pdf is not None:
            if emit:
                emit(ReaderEvent(type=EventType.PDF_DETECTED, url=url, content_kind=pdf.kind))
            return pdf

        if emit:
            emit(
                ReaderEvent(
                    type=EventType.BROWSER_RENDER_STARTED,
                    url=url,
                    message=f"Rendering {url} in headless browser",
                )
            )

        try:
            markup = await self._renderer.render(url)
        except FetchError as e:
            logger.error(f"Acquisition failed for {url}: {e} (cause: {e.__cause__!r})")
            raise

        return HtmlContent(markup)
