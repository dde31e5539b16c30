"""HTTP client and rate limiting for urlreader."""

from .client import AsyncHttpClient, matches_media_type
from .protocols import HttpClient, HttpResponse
from .rate_limiter import Admission, FixedWindowRateLimiter, RateBucket

__all__ = [
    "Admission",
    "AsyncHttpClient",
    "FixedWindowRateLimiter",
    "HttpClient",
    "HttpResponse",
    "RateBucket",
    "matches_media_type",
]
