"""
urlreader - Convert any web page or PDF to clean Markdown.

Usage:
    from urlreader import Reader, ReaderConfig

    async with Reader(ReaderConfig()) as reader:
        markdown = await reader.convert("https://example.com/article")

    # Or from synchronous code
    from urlreader import convert_blocking

    markdown = convert_blocking("https%3A%2F%2Fexample.com%2Fpaper.pdf")
"""

__version__ = "1.0.0"

from .core import ContentAcquirer, Reader, ReaderPipeline, convert_blocking
from .errors import FetchError, InvalidURLError, PdfParseError, RateLimitedError, ReaderError
from .models.config import (
    BrowserConfig,
    NetworkConfig,
    RateLimitConfig,
    ReaderConfig,
    SecurityConfig,
    ServerConfig,
)
from .models.content import ContentKind, HtmlContent, PdfContent, TargetUrl
from .models.events import EventType, ReaderEvent

__all__ = [
    "__version__",
    # Core
    "Reader",
    "ReaderPipeline",
    "ContentAcquirer",
    "convert_blocking",
    # Config
    "ReaderConfig",
    "RateLimitConfig",
    "NetworkConfig",
    "BrowserConfig",
    "SecurityConfig",
    "ServerConfig",
    # Content
    "TargetUrl",
    "ContentKind",
    "HtmlContent",
    "PdfContent",
    # Events
    "EventType",
    "ReaderEvent",
    # Errors
    "ReaderError",
    "InvalidURLError",
    "RateLimitedError",
    "FetchError",
    "PdfParseError",
]
