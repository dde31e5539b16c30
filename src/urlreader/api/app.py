"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single ``Reader`` (HTTP session, browser
renderer, rate limiter) shared across requests via
``request.app.state.reader``. On shutdown it is closed.

Errors
------
Reader failures map to plain-text responses:

    InvalidURLError   → 400
    RateLimitedError  → 429 with Retry-After
    FetchError        → 502
    PdfParseError     → 500

Run with:
    uvicorn urlreader.api.app:create_app --factory
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..core import Reader, ensure_trailing_newline
from ..errors import FetchError, InvalidURLError, PdfParseError, RateLimitedError
from ..models.config import ReaderConfig
from .routers import reader as reader_router

logger = logging.getLogger(__name__)


def _text(body: str, status_code: int, headers: Optional[dict[str, str]] = None) -> PlainTextResponse:
    return PlainTextResponse(ensure_trailing_newline(body), status_code=status_code, headers=headers)


async def _invalid_url(request: Request, exc: InvalidURLError) -> PlainTextResponse:
    logger.debug(f"Rejected input {exc.raw!r}: {exc.reason}")
    return _text("Invalid URL", 400)


async def _rate_limited(request: Request, exc: RateLimitedError) -> PlainTextResponse:
    return _text("Rate limit exceeded", 429, headers={"Retry-After": str(exc.retry_after)})


async def _fetch_failed(request: Request, exc: FetchError) -> PlainTextResponse:
    return _text(str(exc), 502)


async def _pdf_failed(request: Request, exc: PdfParseError) -> PlainTextResponse:
    logger.error(f"PDF conversion failed for {request.url.path}: {exc}")
    return _text(str(exc), 500)


def create_app(config: Optional[ReaderConfig] = None) -> FastAPI:
    """Return a fully-configured FastAPI application instance.

    Args:
        config: Reader configuration (read from the environment if None)
    """
    config = config or ReaderConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open the reader on startup and close it on shutdown."""
        async with Reader(config) as reader:
            app.state.reader = reader
            logger.info(f"Reader listening on {config.server.host}:{config.server.port}")
            yield

    app = FastAPI(
        title="urlreader",
        description="Convert any web page or PDF to clean Markdown.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(GZipMiddleware, minimum_size=config.server.gzip_minimum_size)

    app.add_exception_handler(InvalidURLError, _invalid_url)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitedError, _rate_limited)  # type: ignore[arg-type]
    app.add_exception_handler(FetchError, _fetch_failed)  # type: ignore[arg-type]
    app.add_exception_handler(PdfParseError, _pdf_failed)  # type: ignore[arg-type]

    app.include_router(reader_router.router)

    return app
