"""Webcapture configuration and capture models."""

from .capture import BrowserEngine, OutputFormat, RenderDecision
from .config import (
    DEFAULT_USER_AGENT,
    BrowserConfig,
    ByteSize,
    CaptureConfig,
    NetworkConfig,
    ServerConfig,
)

__all__ = [
    # Capture
    "BrowserEngine",
    "OutputFormat",
    "RenderDecision",
    # Config
    "BrowserConfig",
    "ByteSize",
    "CaptureConfig",
    "DEFAULT_USER_AGENT",
    "NetworkConfig",
    "ServerConfig",
]
