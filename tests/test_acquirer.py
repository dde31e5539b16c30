"""Tests for content acquisition."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from urlreader.core import PDF_MEDIA_TYPE, ContentAcquirer
from urlreader.errors import FetchError
from urlreader.http import HttpResponse
from urlreader.models import ContentKind, EventType, HtmlContent, PdfContent, TargetUrl

TARGET = TargetUrl("https://example.com/paper")


def _pdf_response(status=200, content=b"%PDF-1.4 fake"):
    return HttpResponse(
        status_code=status,
        content=content,
        content_type="application/pdf",
        headers={"Content-Type": "application/pdf"},
        url=str(TARGET),
    )


@pytest.fixture
def http_client():
    """Create mock probe client that finds no PDF."""
    client = MagicMock()
    client.probe = AsyncMock(return_value=None)
    return client


@pytest.fixture
def renderer():
    """Create mock browser renderer."""
    renderer = MagicMock()
    renderer.render = AsyncMock(return_value="<html><body>Rendered</body></html>")
    return renderer


class TestProbePdf:
    """Tests for ContentAcquirer.probe_pdf."""

    @pytest.mark.asyncio
    async def test_detects_pdf(self, http_client, renderer):
        """Test a PDF response is returned as PdfContent."""
        http_client.probe.return_value = _pdf_response()
        acquirer = ContentAcquirer(http_client, renderer, probe_timeout=5)

        pdf = await acquirer.probe_pdf(TARGET)

        assert isinstance(pdf, PdfContent)
        assert pdf.data == b"%PDF-1.4 fake"
        http_client.probe.assert_awaited_once_with(str(TARGET), PDF_MEDIA_TYPE, timeout=5)

    @pytest.mark.asyncio
    async def test_not_pdf(self, http_client, renderer):
        """Test a non-PDF response yields None."""
        assert await ContentAcquirer(http_client, renderer).probe_pdf(TARGET) is None

    @pytest.mark.asyncio
    async def test_error_status_ignored(self, http_client, renderer):
        """Test an error page served as PDF is not used."""
        http_client.probe.return_value = _pdf_response(status=404)
        assert await ContentAcquirer(http_client, renderer).probe_pdf(TARGET) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            aiohttp.ClientConnectionError("refused"),
            asyncio.TimeoutError(),
            ValueError("Content size limit exceeded"),
            OSError("network unreachable"),
        ],
    )
    async def test_probe_errors_mean_not_pdf(self, http_client, renderer, error):
        """Test probe failures are swallowed as 'not a PDF'."""
        http_client.probe.side_effect = error
        assert await ContentAcquirer(http_client, renderer).probe_pdf(TARGET) is None


class TestAcquire:
    """Tests for ContentAcquirer.acquire."""

    @pytest.mark.asyncio
    async def test_pdf_skips_browser(self, http_client, renderer):
        """Test the browser is never started when the probe finds a PDF."""
        http_client.probe.return_value = _pdf_response()
        events = []

        content = await ContentAcquirer(http_client, renderer).acquire(TARGET, events.append)

        assert content.kind == ContentKind.PDF
        renderer.render.assert_not_called()
        assert [e.type for e in events] == [EventType.PDF_DETECTED]

    @pytest.mark.asyncio
    async def test_html_rendered_after_probe(self, http_client, renderer):
        """Test non-PDF targets are rendered after the probe."""
        events = []

        content = await ContentAcquirer(http_client, renderer).acquire(TARGET, events.append)

        assert content == HtmlContent("<html><body>Rendered</body></html>")
        http_client.probe.assert_awaited_once()
        renderer.render.assert_awaited_once_with(str(TARGET))
        assert [e.type for e in events] == [EventType.BROWSER_RENDER_STARTED]

    @pytest.mark.asyncio
    async def test_probe_failure_falls_through_to_browser(self, http_client, renderer):
        """Test a failed probe still renders the page."""
        http_client.probe.side_effect = aiohttp.ClientConnectionError("reset")

        content = await ContentAcquirer(http_client, renderer).acquire(TARGET)

        assert isinstance(content, HtmlContent)
        renderer.render.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_render_failure_propagates(self, http_client, renderer):
        """Test a browser failure surfaces as FetchError."""
        renderer.render.side_effect = FetchError(str(TARGET), "net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(FetchError):
            await ContentAcquirer(http_client, renderer).acquire(TARGET)
