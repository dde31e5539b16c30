"""Pydantic configuration models for urlreader."""

import os
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class ByteSize(int):
    """
    Custom type that parses human-readable byte sizes.

    Accepts:
        - Integers (bytes)
        - Strings like '200kb', '1mb', '5gb'

    Examples:
        >>> ByteSize._parse('200kb')
        204800
        >>> ByteSize._parse(1024)
        1024
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls._parse)

    @classmethod
    def _parse(cls, v: Any) -> int:
        if isinstance(v, int):
            return v
        if isinstance(v, str):
            v = v.lower().strip()
            # Longer suffixes first
            units = [("gb", 1024**3), ("mb", 1024**2), ("kb", 1024), ("b", 1)]
            for unit, mult in units:
                if v.endswith(unit):
                    num_str = v[: -len(unit)].strip()
                    try:
                        return int(float(num_str) * mult)
                    except ValueError as err:
                        raise ValueError(f"Invalid number in byte size: {v}") from err
            try:
                return int(v)
            except ValueError:
                pass
        raise ValueError(f"Invalid byte size: {v}. Use format like '200kb', '1mb', or integer bytes.")


class RateLimitConfig(BaseModel):
    """Fixed-window admission control per client."""

    capacity: int = Field(20, ge=1, description="Requests admitted per client per window")
    window_seconds: float = Field(60.0, gt=0, description="Window length in seconds")
    max_buckets: int = Field(
        10_000,
        ge=1,
        description="Maximum tracked clients before stale buckets are evicted",
    )

    model_config = {"extra": "forbid"}


class NetworkConfig(BaseModel):
    """Configuration for the direct PDF probe."""

    probe_timeout: float = Field(10.0, gt=0, description="PDF probe timeout in seconds")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent for the probe request")
    max_content_size: ByteSize = Field(
        ByteSize(50 * 1024 * 1024),
        description="Maximum PDF size to download (e.g., '20mb')",
    )

    model_config = {"extra": "forbid"}


class BrowserConfig(BaseModel):
    """Configuration for headless browser rendering."""

    executable_path: Optional[Path] = Field(None, description="Chromium executable override")
    headless: bool = Field(True, description="Run the browser without a display")
    navigation_timeout: float = Field(15.0, gt=0, description="Page navigation timeout in seconds")
    launch_timeout: float = Field(15.0, gt=0, description="Browser launch timeout in seconds")
    max_concurrent: Optional[int] = Field(
        None,
        ge=1,
        description="Cap on simultaneous browser processes (None = unbounded)",
    )
    extra_args: list[str] = Field(default_factory=list, description="Additional Chromium flags")

    model_config = {"extra": "forbid"}


class SecurityConfig(BaseModel):
    """Policy applied to resolved target URLs."""

    allowed_schemes: Optional[set[str]] = Field(
        default_factory=lambda: {"http", "https"},
        description="Schemes accepted by the resolver (null = any)",
    )
    block_private_ips: bool = Field(
        False,
        description="Reject localhost, private, link-local and internal hosts",
    )

    model_config = {"extra": "forbid"}


class ServerConfig(BaseModel):
    """Configuration for the HTTP front end."""

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(8080, ge=1, le=65535, description="Port to listen on")
    trust_forwarded_for: bool = Field(
        False,
        description="Identify clients by the first X-Forwarded-For entry",
    )
    gzip_minimum_size: int = Field(1024, ge=0, description="Smallest response body to compress")

    model_config = {"extra": "forbid"}


def _env(name: str) -> Optional[str]:
    value = os.environ.get(name)
    return value if value not in (None, "") else None


class ReaderConfig(BaseModel):
    """
    Root configuration model for urlreader.

    Example:
        config = ReaderConfig(
            rate_limit=RateLimitConfig(capacity=5),
            browser=BrowserConfig(executable_path=Path("/usr/bin/chromium")),
        )

    YAML format:
        rate_limit:
          capacity: 20
          window_seconds: 60
        browser:
          navigation_timeout: 15
        server:
          port: 8080
    """

    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "ReaderConfig":
        """
        Build config from environment variables.

        A ``.env`` file is loaded first (existing variables win).

        Args:
            env_file: Optional explicit path to the .env file

        Returns:
            ReaderConfig with environment overrides applied
        """
        from dotenv import load_dotenv

        load_dotenv(env_file, override=False)

        rate_limit: dict[str, Any] = {}
        if _env("RATE_LIMIT"):
            rate_limit["capacity"] = _env("RATE_LIMIT")
        if _env("RATE_WINDOW_SECONDS"):
            rate_limit["window_seconds"] = _env("RATE_WINDOW_SECONDS")
        if _env("RATE_MAX_BUCKETS"):
            rate_limit["max_buckets"] = _env("RATE_MAX_BUCKETS")

        network: dict[str, Any] = {}
        if _env("PROBE_TIMEOUT"):
            network["probe_timeout"] = _env("PROBE_TIMEOUT")

        browser: dict[str, Any] = {}
        if _env("OVERRIDE_CHROME_EXECUTABLE_PATH"):
            browser["executable_path"] = _env("OVERRIDE_CHROME_EXECUTABLE_PATH")
        if _env("DEBUG_BROWSER"):
            browser["headless"] = False
        if _env("NAVIGATION_TIMEOUT"):
            browser["navigation_timeout"] = _env("NAVIGATION_TIMEOUT")
        if _env("MAX_CONCURRENT_BROWSERS"):
            browser["max_concurrent"] = _env("MAX_CONCURRENT_BROWSERS")

        server: dict[str, Any] = {}
        if _env("HOST"):
            server["host"] = _env("HOST")
        if _env("PORT"):
            server["port"] = _env("PORT")

        data: dict[str, Any] = {
            "rate_limit": rate_limit,
            "network": network,
            "browser": browser,
            "server": server,
        }
        if _env("LOG_LEVEL"):
            data["log_level"] = _env("LOG_LEVEL").upper()  # type: ignore[union-attr]
        return cls.model_validate(data)

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ReaderConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ReaderConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
