"""URL resolution and target policy for urlreader."""

from .url_resolver import UrlResolver, UrlValidationResult, resolve_url

__all__ = ["UrlResolver", "UrlValidationResult", "resolve_url"]
