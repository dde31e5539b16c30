"""Headless browser rendering with one isolated browser process per request."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from playwright.async_api import Browser, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import FetchError

logger = logging.getLogger(__name__)

# Flags needed to run Chromium inside a container
DEFAULT_BROWSER_ARGS = (
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
)

# Extra time allowed for launch, UA lookup and serialization beyond the configured timeouts
RENDER_GRACE_SECONDS = 10.0
CLOSE_TIMEOUT_SECONDS = 5.0

_HEADLESS_MARKER = re.compile(r"headless", re.IGNORECASE)


def strip_headless_marker(user_agent: str) -> str:
    """Remove the 'Headless' marker Chromium adds to its User-Agent."""
    return _HEADLESS_MARKER.sub("", user_agent)


@asynccontextmanager
async def launch_browser(
    executable_path: Path | str | None = None,
    headless: bool = True,
    launch_timeout: float = 15.0,
    extra_args: list[str] | None = None,
) -> AsyncIterator[Browser]:
    """
    Launch a Chromium process and tear it down on every exit path.

    The browser is closed when the block exits normally, raises, or is
    cancelled. Stopping the Playwright driver afterwards kills any browser
    process that did not shut down in time.

    Example:
        async with launch_browser(headless=True) as browser:
            page = await browser.new_page()

    Args:
        executable_path: Chromium binary to use instead of Playwright's bundled one
        headless: Run without a display
        launch_timeout: Seconds to wait for the browser to start
        extra_args: Additional Chromium command-line flags
    """
    playwright = await async_playwright().start()
    browser: Browser | None = None
    try:
        browser = await playwright.chromium.launch(
            headless=headless,
            executable_path=str(executable_path) if executable_path else None,
            args=[*DEFAULT_BROWSER_ARGS, *(extra_args or [])],
            timeout=launch_timeout * 1000,
        )
        logger.debug(f"Browser launched (version {browser.version})")
        yield browser
    finally:
        if browser is not None:
            try:
                await asyncio.wait_for(browser.close(), timeout=CLOSE_TIMEOUT_SECONDS)
            except (PlaywrightError, asyncio.TimeoutError) as e:
                logger.debug(f"Error closing browser, stopping driver: {e}")
        await playwright.stop()
        logger.debug("Browser shut down")


class BrowserRenderer:
    """
    Render pages with a fresh headless browser per call.

    No state is shared between renders: every call launches its own
    browser process, so cookies and storage never leak across requests.
    An optional semaphore caps how many browsers run at once.

    Example:
        renderer = BrowserRenderer(navigation_timeout=15.0)
        html = await renderer.render("https://example.com")
    """

    def __init__(
        self,
        executable_path: Path | str | None = None,
        headless: bool = True,
        navigation_timeout: float = 15.0,
        launch_timeout: float = 15.0,
        max_concurrent: int | None = None,
        extra_args: list[str] | None = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            executable_path: Chromium binary override
            headless: Run in headless mode
            navigation_timeout: Page navigation timeout (seconds)
            launch_timeout: Browser launch timeout (seconds)
            max_concurrent: Maximum simultaneous browser processes (None = unbounded)
            extra_args: Additional Chromium flags
        """
        self._executable_path = executable_path
        self._headless = headless
        self._navigation_timeout = navigation_timeout
        self._launch_timeout = launch_timeout
        self._extra_args = list(extra_args or [])
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None

    @property
    def hard_timeout(self) -> float:
        """Upper bound on a single render, cleanup excluded."""
        return self._launch_timeout + self._navigation_timeout + RENDER_GRACE_SECONDS

    async def render(self, url: str) -> str:
        """
        Navigate to a URL and return the serialized document markup.

        Args:
            url: URL to render

        Returns:
            Full HTML of the document after DOMContentLoaded

        Raises:
            FetchError: If the browser cannot launch or the page cannot be loaded
        """
        if self._semaphore is None:
            return await self._render_with_deadline(url)
        async with self._semaphore:
            return await self._render_with_deadline(url)

    async def _render_with_deadline(self, url: str) -> str:
        try:
            return await asyncio.wait_for(self._render(url), timeout=self.hard_timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Browser render of {url} exceeded {self.hard_timeout:.0f}s")
            raise FetchError(url, "browser render timed out") from e
        except PlaywrightError as e:
            logger.error(f"Browser render error for {url}: {e}")
            raise FetchError(url, f"browser render failed: {e}") from e

    async def _clean_user_agent(self, browser: Browser) -> str:
        """Read the browser's default User-Agent and strip the headless marker."""
        page = await browser.new_page()
        try:
            user_agent: str = await page.evaluate("() => navigator.userAgent")
        finally:
            await page.close()
        return strip_headless_marker(user_agent)

    async def _render(self, url: str) -> str:
        async with launch_browser(
            executable_path=self._executable_path,
            headless=self._headless,
            launch_timeout=self._launch_timeout,
            extra_args=self._extra_args,
        ) as browser:
            user_agent = await self._clean_user_agent(browser)
            context = await browser.new_context(user_agent=user_agent)
            page = await context.new_page()

            try:
                await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self._navigation_timeout * 1000,
                )
            except PlaywrightTimeoutError:
                # Keep whatever DOM exists if a document was committed
                if page.url in ("", "about:blank"):
                    raise
                logger.warning(
                    f"Navigation to {url} timed out after {self._navigation_timeout:.0f}s, "
                    "using partially loaded document"
                )

            html: str = await page.content()
            logger.debug(f"Browser rendered {url}: {len(html)} characters")
            return html
