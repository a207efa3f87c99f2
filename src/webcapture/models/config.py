"""Pydantic configuration models for webcapture."""

import os
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .capture import BrowserEngine

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ByteSize(int):
    """
    Custom type that parses human-readable byte sizes.

    Accepts:
        - Integers (bytes)
        - Strings like '200kb', '1mb', '5gb'

    Examples:
        >>> ByteSize._parse('200kb')
        204800
        >>> ByteSize._parse('1mb')
        1048576
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
            # Order matters: check longer suffixes first
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


class NetworkConfig(BaseModel):
    """Configuration for the direct HTTP fetch path."""

    timeout: float = Field(30.0, gt=0, description="Total request timeout in seconds")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")
    max_content_size: ByteSize = Field(
        ByteSize(50 * 1024 * 1024),
        description="Maximum buffered response size (e.g., '10mb')",
    )

    model_config = {"extra": "forbid"}


class BrowserConfig(BaseModel):
    """Configuration for browser-backed captures."""

    engine: BrowserEngine = Field(
        BrowserEngine.PUPPETEER,
        description="Default browser engine (puppeteer or playwright)",
    )
    headless: bool = Field(True, description="Run the browser without a window")
    viewport_width: int = Field(1280, ge=1, description="Viewport width in pixels")
    viewport_height: int = Field(800, ge=1, description="Viewport height in pixels")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent presented by the browser")
    navigation_timeout: float = Field(
        30.0,
        gt=0,
        description="Seconds to wait for the network to become idle",
    )
    settle_delay: float = Field(
        5.0,
        ge=0,
        description="Seconds to wait after load for late client-side rendering",
    )
    extra_headers: dict[str, str] = Field(
        default_factory=lambda: {
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Charset": "utf-8",
        },
        description="Extra HTTP headers sent with every browser request",
    )

    model_config = {"extra": "forbid"}


class ServerConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(3000, ge=1, le=65535, description="Port to listen on")

    model_config = {"extra": "forbid"}


class CaptureConfig(BaseModel):
    """
    Root configuration model for webcapture.

    Example:
        config = CaptureConfig(
            browser=BrowserConfig(engine=BrowserEngine.PLAYWRIGHT),
            server=ServerConfig(port=8080),
        )

    YAML format:
        browser:
          engine: playwright
          settle_delay: 2
        server:
          port: 8080
    """

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    def with_env_overrides(self) -> "CaptureConfig":
        """
        Return a copy with ``PORT`` and ``BROWSER_ENGINE`` applied.

        Unset or unparsable variables leave the configured value in place.
        """
        updated = self.model_copy(deep=True)

        port = os.environ.get("PORT")
        if port and port.isdigit():
            updated.server.port = int(port)

        engine = os.environ.get("BROWSER_ENGINE")
        if engine:
            updated.browser.engine = BrowserEngine.parse(engine, default=updated.browser.engine)

        return updated

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "CaptureConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "CaptureConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
