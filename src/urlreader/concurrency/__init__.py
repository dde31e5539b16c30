"""Concurrency management for urlreader."""

from .browser_pool import BrowserRenderer, launch_browser, strip_headless_marker
from .manager import ConcurrencyManager

__all__ = [
    "BrowserRenderer",
    "ConcurrencyManager",
    "launch_browser",
    "strip_headless_marker",
]
