"""Resolution of raw user input into validated absolute target URLs."""

from __future__ import annotations

import ipaddress
import logging
import re
from dataclasses import dataclass
from urllib.parse import SplitResult, quote, unquote, urlsplit, urlunsplit

from ..errors import InvalidURLError
from ..models.content import TargetUrl

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"

DEFAULT_ALLOWED_SCHEMES = frozenset({"http", "https"})


@dataclass
class UrlValidationResult:
    """Result of URL policy validation."""

    is_valid: bool
    rejection_reason: str | None = None

    @staticmethod
    def valid() -> UrlValidationResult:
        """Create a valid result."""
        return UrlValidationResult(is_valid=True)

    @staticmethod
    def invalid(reason: str) -> UrlValidationResult:
        """Create an invalid result with reason."""
        return UrlValidationResult(is_valid=False, rejection_reason=reason)


def _parse_absolute(candidate: str) -> SplitResult | None:
    """Split candidate if it is an absolute URL with a scheme and a host."""
    if not candidate or _CONTROL_CHARS.search(candidate):
        return None
    try:
        parts = urlsplit(candidate)
        # Raises ValueError on a malformed port
        _ = parts.port
    except ValueError:
        return None

    if not parts.scheme or not parts.netloc or not parts.hostname:
        return None
    if any(ch.isspace() for ch in parts.netloc):
        return None
    return parts


def _normalize(parts: SplitResult) -> str:
    """Lower-case scheme and host and give hierarchical URLs a root path."""
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    if "@" in parts.netloc:
        userinfo = parts.netloc.rsplit("@", 1)[0]
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path, safe=_PATH_SAFE)
    if not path and scheme in ("http", "https"):
        path = "/"

    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


class UrlResolver:
    """
    Turns raw input into a TargetUrl.

    Accepts an absolute URL as-is, or after exactly one percent-decoding
    pass so a target can be passed as a single path segment
    (``/https%3A%2F%2Fexample.com``). Relative URLs are always rejected.

    Policy blocks SSRF targets:
    - Schemes outside allowed_schemes (http and https unless configured)
    - Private/internal IP addresses (opt-in)
    - Localhost and internal domain suffixes (opt-in)

    Example:
        resolver = UrlResolver()
        target = resolver.resolve("https%3A%2F%2Fexample.com%2Farticle")
        print(target)  # https://example.com/article
    """

    INTERNAL_SUFFIXES = {".internal", ".local", ".localhost", ".localdomain"}
    LOCALHOST_NAMES = {"localhost", "localhost.localdomain"}

    def __init__(
        self,
        allowed_schemes: set[str] | frozenset[str] | None = DEFAULT_ALLOWED_SCHEMES,
        block_private_ips: bool = False,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the URL resolver.

        Args:
            allowed_schemes: Set of allowed URL schemes, http and https by default (None = any)
            block_private_ips: Whether to block private/internal hosts
            logger: Optional logger for resolution messages
        """
        self.allowed_schemes = {s.lower() for s in allowed_schemes} if allowed_schemes is not None else None
        self.block_private_ips = block_private_ips
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, raw: str | None) -> TargetUrl:
        """
        Validate and normalize raw input.

        Args:
            raw: User-supplied URL string, possibly percent-encoded once

        Returns:
            TargetUrl for the normalized absolute URL

        Raises:
            InvalidURLError: If the input is empty, unparseable, or rejected by policy
        """
        if raw is None or not raw.strip():
            raise InvalidURLError(raw, "No URL provided")

        trimmed = raw.strip()
        parts = _parse_absolute(trimmed)
        if parts is None:
            decoded = unquote(trimmed)
            if decoded != trimmed:
                parts = _parse_absolute(decoded.strip())

        if parts is None:
            self.logger.debug(f"Rejected unparseable URL input: {trimmed!r}")
            raise InvalidURLError(raw)

        url = _normalize(parts)
        result = self.validate(url)
        if not result.is_valid:
            self.logger.info(f"Rejected {url}: {result.rejection_reason}")
            raise InvalidURLError(raw, result.rejection_reason or "URL not allowed")

        return TargetUrl(url)

    def validate(self, url: str) -> UrlValidationResult:
        """
        Validate a parsed URL against the configured policy.

        Args:
            url: The absolute URL to validate

        Returns:
            UrlValidationResult with is_valid and optional rejection_reason
        """
        parsed = urlsplit(url)

        if self.allowed_schemes is not None and parsed.scheme not in self.allowed_schemes:
            return UrlValidationResult.invalid(
                f"Scheme '{parsed.scheme}' not allowed (allowed: {sorted(self.allowed_schemes)})"
            )

        if not self.block_private_ips:
            return UrlValidationResult.valid()

        hostname = (parsed.hostname or "").lower()

        if hostname in self.LOCALHOST_NAMES:
            return UrlValidationResult.invalid("Localhost URLs not allowed")

        for suffix in self.INTERNAL_SUFFIXES:
            if hostname.endswith(suffix):
                return UrlValidationResult.invalid(f"Internal domain suffix '{suffix}' not allowed")

        ip_result = self._check_ip_address(hostname)
        if ip_result is not None:
            return ip_result

        return UrlValidationResult.valid()

    def _check_ip_address(self, hostname: str) -> UrlValidationResult | None:
        """
        Check if hostname is a private/internal IP address.

        Returns:
            UrlValidationResult if IP is blocked, None if hostname is allowed or not an IP
        """
        try:
            ip = ipaddress.ip_address(hostname)
        except ValueError:
            # A domain name, not an IP literal
            return None

        if ip.is_loopback:
            return UrlValidationResult.invalid(f"Loopback IP address '{hostname}' not allowed")
        if ip.is_private:
            return UrlValidationResult.invalid(f"Private IP address '{hostname}' not allowed")
        if ip.is_link_local:
            return UrlValidationResult.invalid(f"Link-local IP address '{hostname}' not allowed")
        if ip.is_reserved:
            return UrlValidationResult.invalid(f"Reserved IP address '{hostname}' not allowed")
        if isinstance(ip, ipaddress.IPv6Address) and ip.is_site_local:
            return UrlValidationResult.invalid(f"Site-local IPv6 address '{hostname}' not allowed")

        return None


def resolve_url(raw: str | None) -> TargetUrl:
    """Resolve raw input with the default policy (http and https, any host)."""
    return UrlResolver().resolve(raw)
