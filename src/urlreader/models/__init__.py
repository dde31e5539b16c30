"""Data models for urlreader."""

from .config import (
    BrowserConfig,
    ByteSize,
    NetworkConfig,
    RateLimitConfig,
    ReaderConfig,
    SecurityConfig,
    ServerConfig,
)
from .content import AcquiredContent, ContentKind, HtmlContent, PdfContent, TargetUrl
from .events import EventEmitter, EventType, ReaderEvent

__all__ = [
    # Config
    "ReaderConfig",
    "RateLimitConfig",
    "NetworkConfig",
    "BrowserConfig",
    "SecurityConfig",
    "ServerConfig",
    "ByteSize",
    # Content
    "TargetUrl",
    "ContentKind",
    "HtmlContent",
    "PdfContent",
    "AcquiredContent",
    # Events
    "EventType",
    "ReaderEvent",
    "EventEmitter",
]
