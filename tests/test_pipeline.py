"""Tests for the reader pipeline and Reader API."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from urlreader.core import Reader, ReaderPipeline, convert_blocking, ensure_trailing_newline
from urlreader.errors import FetchError, InvalidURLError, PdfParseError, RateLimitedError
from urlreader.models import EventType, HtmlContent, PdfContent, RateLimitConfig, ReaderConfig
from urlreader.security import UrlResolver


@pytest.fixture
def acquirer():
    """Create mock acquirer returning rendered HTML."""
    acquirer = MagicMock()
    acquirer.acquire = AsyncMock(return_value=HtmlContent("<article><h1>Title</h1><p>Body text.</p></article>"))
    return acquirer


class TestEnsureTrailingNewline:
    """Tests for ensure_trailing_newline."""

    @pytest.mark.parametrize("text,expected", [("abc", "abc\n"), ("abc\n", "abc\n"), ("", "\n")])
    def test_terminates(self, text, expected):
        """Test exactly one trailing newline is guaranteed."""
        assert ensure_trailing_newline(text) == expected


class TestReaderPipeline:
    """Tests for ReaderPipeline.run."""

    @pytest.mark.asyncio
    async def test_html_flow(self, acquirer):
        """Test resolve, acquire and transform run in order."""
        pipeline = ReaderPipeline(UrlResolver(), acquirer)
        events = []

        markdown = await pipeline.run("https%3A%2F%2Fexample.com%2Farticle", emit=events.append)

        assert markdown.startswith("# Title")
        assert "Body text." in markdown
        target = acquirer.acquire.call_args.args[0]
        assert str(target) == "https://example.com/article"
        types = [e.type for e in events]
        assert types[0] == EventType.STARTED
        assert types[1] == EventType.URL_RESOLVED
        assert types[-1] == EventType.CONVERTED

    @pytest.mark.asyncio
    async def test_invalid_url_never_acquires(self, acquirer):
        """Test that nothing is fetched for invalid input."""
        pipeline = ReaderPipeline(UrlResolver(), acquirer)
        events = []

        with pytest.raises(InvalidURLError):
            await pipeline.run("not a url", emit=events.append)

        acquirer.acquire.assert_not_called()
        assert events[-1].type == EventType.FAILED
        assert events[-1].is_error

    @pytest.mark.asyncio
    async def test_pdf_flow(self, acquirer, pdf_factory):
        """Test PDF content is converted page by page."""
        acquirer.acquire.return_value = PdfContent(pdf_factory(["Intro", "Body"]))
        pipeline = ReaderPipeline(UrlResolver(), acquirer)

        markdown = await pipeline.run("https://example.com/paper.pdf")

        assert markdown.startswith("# Page 1")
        assert "# Page 2" in markdown

    @pytest.mark.asyncio
    async def test_corrupt_pdf_raises(self, acquirer):
        """Test unreadable PDF bytes surface as PdfParseError."""
        acquirer.acquire.return_value = PdfContent(b"garbage")
        pipeline = ReaderPipeline(UrlResolver(), acquirer)

        with pytest.raises(PdfParseError):
            await pipeline.run("https://example.com/broken.pdf")

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, acquirer):
        """Test acquisition failures surface unchanged."""
        acquirer.acquire.side_effect = FetchError("https://example.com/", "net::ERR_CONNECTION_REFUSED")
        pipeline = ReaderPipeline(UrlResolver(), acquirer)

        with pytest.raises(FetchError):
            await pipeline.run("https://example.com/")

    @pytest.mark.asyncio
    async def test_extraction_skipped_event(self, acquirer):
        """Test an empty page reports skipped extraction and still converts."""
        acquirer.acquire.return_value = HtmlContent("")
        pipeline = ReaderPipeline(UrlResolver(), acquirer)
        events = []

        markdown = await pipeline.run("https://example.com/", emit=events.append)

        assert markdown == ""
        assert EventType.EXTRACTION_SKIPPED in [e.type for e in events]

    @pytest.mark.asyncio
    async def test_runs_on_thread_pool(self, acquirer):
        """Test conversions go through the concurrency manager when given."""
        from urlreader.concurrency import ConcurrencyManager

        async with ConcurrencyManager(max_workers=1) as manager:
            pipeline = ReaderPipeline(UrlResolver(), acquirer, concurrency=manager)
            with patch.object(manager, "run_cpu_bound", wraps=manager.run_cpu_bound) as spy:
                markdown = await pipeline.run("https://example.com/")

        assert "Body text." in markdown
        spy.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_content_rejected(self, acquirer):
        """Test unsupported content types are a programming error."""
        acquirer.acquire.return_value = object()
        pipeline = ReaderPipeline(UrlResolver(), acquirer)

        with pytest.raises(TypeError):
            await pipeline.run("https://example.com/")


class TestReader:
    """Tests for the Reader context manager."""

    def test_pipeline_requires_context(self):
        """Test using the reader outside 'async with' fails."""
        with pytest.raises(RuntimeError):
            _ = Reader().pipeline

    @pytest.mark.asyncio
    async def test_convert_rate_limited(self):
        """Test a client over quota is refused before any work."""
        config = ReaderConfig(rate_limit=RateLimitConfig(capacity=1))
        async with Reader(config) as reader:
            reader._pipeline = MagicMock()
            reader._pipeline.run = AsyncMock(return_value="# Doc")

            assert await reader.convert("https://example.com/", client_id="1.2.3.4") == "# Doc"
            with pytest.raises(RateLimitedError) as exc_info:
                await reader.convert("https://example.com/", client_id="1.2.3.4")

        assert exc_info.value.retry_after >= 1
        assert reader._pipeline is None

    @pytest.mark.asyncio
    async def test_convert_without_client_not_limited(self):
        """Test local callers without a client id are never limited."""
        config = ReaderConfig(rate_limit=RateLimitConfig(capacity=1))
        async with Reader(config) as reader:
            reader._pipeline = MagicMock()
            reader._pipeline.run = AsyncMock(return_value="# Doc")

            for _ in range(3):
                await reader.convert("https://example.com/")

    @pytest.mark.asyncio
    async def test_rate_limited_before_resolution(self):
        """Test quota is counted even for invalid input."""
        config = ReaderConfig(rate_limit=RateLimitConfig(capacity=1))
        async with Reader(config) as reader:
            with pytest.raises(InvalidURLError):
                await reader.convert("", client_id="c")
            with pytest.raises(RateLimitedError):
                await reader.convert("", client_id="c")


class TestConvertBlocking:
    """Tests for convert_blocking."""

    @pytest.mark.asyncio
    async def test_refuses_running_loop(self):
        """Test calling from async code raises."""
        with pytest.raises(RuntimeError, match="async context"):
            convert_blocking("https://example.com/")

    def test_invalid_url(self):
        """Test invalid input raises without fetching."""
        with pytest.raises(InvalidURLError):
            convert_blocking("relative/path")
