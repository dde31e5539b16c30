"""Reader pipeline: resolve, acquire, transform."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any, Callable, Optional, TypeVar

from ..concurrency import BrowserRenderer, ConcurrencyManager
from ..conversion import HtmlTransformer, PdfToMarkdown
from ..errors import RateLimitedError, ReaderError
from ..http import AsyncHttpClient, FixedWindowRateLimiter
from ..models.config import ReaderConfig
from ..models.content import AcquiredContent, HtmlContent, PdfContent, TargetUrl
from ..models.events import EventEmitter, EventType, ReaderEvent
from ..security import UrlResolver
from .acquirer import ContentAcquirer

logger = logging.getLogger(__name__)

T = TypeVar("T")


def ensure_trailing_newline(markdown: str) -> str:
    """Terminate the text with exactly the newline the wire format requires."""
    return markdown if markdown.endswith("\n") else markdown + "\n"


class ReaderPipeline:
    """
    Sequences URL resolution, content acquisition and transformation.

    Failures from the resolver and acquirer surface unchanged. The HTML
    transformer never fails; the PDF transformer fails with PdfParseError.

    Example:
        pipeline = ReaderPipeline(UrlResolver(), acquirer)
        markdown = await pipeline.run("https%3A%2F%2Fexample.com%2Farticle")
    """

    def __init__(
        self,
        resolver: UrlResolver,
        acquirer: ContentAcquirer,
        html_transformer: Optional[HtmlTransformer] = None,
        pdf_transformer: Optional[PdfToMarkdown] = None,
        concurrency: Optional[ConcurrencyManager] = None,
    ) -> None:
        """
        Args:
            resolver: Turns raw input into a TargetUrl
            acquirer: Chooses PDF probe or browser render
            html_transformer: HTML to Markdown (uses default if None)
            pdf_transformer: PDF to Markdown (uses default if None)
            concurrency: Thread pool for conversions (runs inline if None)
        """
        self._resolver = resolver
        self._acquirer = acquirer
        self._html = html_transformer or HtmlTransformer()
        self._pdf = pdf_transformer or PdfToMarkdown()
        self._concurrency = concurrency

    async def _run_blocking(self, func: Callable[..., T], *args: Any) -> T:
        if self._concurrency is None:
            return func(*args)
        return await self._concurrency.run_cpu_bound(func, *args)

    async def transform(
        self,
        content: AcquiredContent,
        target: TargetUrl,
        emit: Optional[EventEmitter] = None,
    ) -> str:
        """
        Dispatch acquired content to the matching transformer.

        Raises:
            PdfParseError: If PDF content cannot be opened
        """
        match content:
            case PdfContent(data=data):
                return await self._run_blocking(self._pdf.convert, data)
            case HtmlContent(markup=markup):
                markdown, extraction = await self._run_blocking(self._html.transform, markup, str(target))
                if not extraction.is_extracted and emit:
                    emit(
                        ReaderEvent(
                            type=EventType.EXTRACTION_SKIPPED,
                            url=str(target),
                            message=extraction.skip_reason,
                        )
                    )
                return markdown
            case _:
                raise TypeError(f"Unsupported content type: {type(content).__name__}")

    async def run(self, raw_url: str, emit: Optional[EventEmitter] = None) -> str:
        """
        Convert the resource behind a raw URL string to Markdown.

        Args:
            raw_url: User-supplied URL, possibly percent-encoded once
            emit: Optional callback for progress events

        Returns:
            Trimmed Markdown

        Raises:
            InvalidURLError: If raw_url cannot be resolved (nothing is fetched)
            FetchError: If no content could be acquired
            PdfParseError: If a fetched PDF cannot be opened
        """
        if emit:
            emit(ReaderEvent(type=EventType.STARTED, url=raw_url, message=f"Reading {raw_url}"))

        try:
            target = self._resolver.resolve(raw_url)
            if emit:
                emit(ReaderEvent(type=EventType.URL_RESOLVED, url=str(target)))

            content = await self._acquirer.acquire(target, emit)
            if emit:
                emit(ReaderEvent(type=EventType.CONTENT_ACQUIRED, url=str(target), content_kind=content.kind))

            markdown = await self.transform(content, target, emit)

        except ReaderError as e:
            if emit:
                emit(ReaderEvent(type=EventType.FAILED, url=raw_url, error=str(e)))
            raise

        if emit:
            emit(
                ReaderEvent(
                    type=EventType.CONVERTED,
                    url=str(target),
                    content_kind=content.kind,
                    message=f"Converted to {len(markdown)} characters of Markdown",
                )
            )
        logger.debug(f"Converted {target} ({content.kind.value}) to {len(markdown)} characters")
        return markdown


class Reader:
    """
    Primary API: owns the rate limiter, HTTP session, renderer and pipeline.

    Example:
        async with Reader(ReaderConfig()) as reader:
            markdown = await reader.convert("https://example.com", client_id="203.0.113.7")
    """

    def __init__(self, config: Optional[ReaderConfig] = None):
        """
        Args:
            config: Reader configuration (defaults if None)
        """
        self.config = config or ReaderConfig()
        self.rate_limiter = FixedWindowRateLimiter(
            capacity=self.config.rate_limit.capacity,
            window_seconds=self.config.rate_limit.window_seconds,
            max_buckets=self.config.rate_limit.max_buckets,
        )
        self.resolver = UrlResolver(
            allowed_schemes=self.config.security.allowed_schemes,
            block_private_ips=self.config.security.block_private_ips,
        )

        # Components (initialized in __aenter__)
        self._http_client: AsyncHttpClient | None = None
        self._concurrency: ConcurrencyManager | None = None
        self._pipeline: ReaderPipeline | None = None

    @property
    def pipeline(self) -> ReaderPipeline:
        if self._pipeline is None:
            raise RuntimeError("Reader not initialized. Use 'async with' context manager.")
        return self._pipeline

    async def __aenter__(self) -> Reader:
        """Enter async context and initialize components."""
        network = self.config.network
        browser = self.config.browser

        self._http_client = AsyncHttpClient(
            max_content_size=network.max_content_size,
            user_agent=network.user_agent,
            default_timeout=network.probe_timeout,
        )
        await self._http_client.__aenter__()

        renderer = BrowserRenderer(
            executable_path=browser.executable_path,
            headless=browser.headless,
            navigation_timeout=browser.navigation_timeout,
            launch_timeout=browser.launch_timeout,
            max_concurrent=browser.max_concurrent,
            extra_args=browser.extra_args,
        )
        acquirer = ContentAcquirer(self._http_client, renderer, probe_timeout=network.probe_timeout)

        self._concurrency = ConcurrencyManager()
        self._pipeline = ReaderPipeline(self.resolver, acquirer, concurrency=self._concurrency)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and cleanup resources."""
        if self._http_client:
            await self._http_client.__aexit__(exc_type, exc_val, exc_tb)
            self._http_client = None

        if self._concurrency:
            self._concurrency.shutdown(wait=False)
            self._concurrency = None

        self._pipeline = None

    def admit(self, client_id: str) -> None:
        """
        Count a request against a client's quota.

        Raises:
            RateLimitedError: If the client has no requests left in this window
        """
        admission = self.rate_limiter.admit(client_id)
        if not admission.allowed:
            raise RateLimitedError(client_id, admission.retry_after or 1)

    async def convert(
        self,
        raw_url: str,
        client_id: Optional[str] = None,
        emit: Optional[EventEmitter] = None,
    ) -> str:
        """
        Rate-limit the client (when given) and convert raw_url to Markdown.

        Raises:
            RateLimitedError: If the client exceeded its quota
            InvalidURLError: If raw_url cannot be resolved
            FetchError: If no content could be acquired
            PdfParseError: If a fetched PDF cannot be opened
        """
        if client_id is not None:
            self.admit(client_id)
        return await self.pipeline.run(raw_url, emit)


def convert_blocking(
    raw_url: str,
    config: Optional[ReaderConfig] = None,
    on_event: Optional[EventEmitter] = None,
) -> str:
    """
    Blocking conversion for sync code that can't use async/await.

    WARNING: Do not call from within an existing event loop. Use the async
    Reader API instead.

    Args:
        raw_url: The URL to convert
        config: Optional reader configuration
        on_event: Optional callback for progress events

    Returns:
        Trimmed Markdown
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("convert_blocking() called from async context. Use 'async with Reader()' instead.")

    async def _run() -> str:
        async with Reader(config) as reader:
            return await reader.convert(raw_url, emit=on_event)

    return asyncio.run(_run())
