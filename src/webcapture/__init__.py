"""
webcapture - Capture web pages as HTML, Markdown, or PNG.

Usage:
    from webcapture import Capturer, CaptureConfig, OutputFormat

    async with Capturer(CaptureConfig()) as capturer:
        markdown = await capturer.capture("https://example.com", OutputFormat.MARKDOWN)
"""

__version__ = "1.0.0"

from .conversion import convert_html_to_markdown, convert_relative_urls, normalize_charset
from .core import Capturer, normalize_url
from .errors import CaptureError, FetchError, InvalidUrlError, MissingParameterError, RenderError
from .models.capture import BrowserEngine, OutputFormat, RenderDecision
from .models.config import BrowserConfig, CaptureConfig, NetworkConfig, ServerConfig

__all__ = [
    "__version__",
    # Core
    "Capturer",
    "normalize_url",
    # Conversion
    "convert_html_to_markdown",
    "convert_relative_urls",
    "normalize_charset",
    # Config
    "CaptureConfig",
    "NetworkConfig",
    "BrowserConfig",
    "ServerConfig",
    # Enums
    "BrowserEngine",
    "OutputFormat",
    "RenderDecision",
    # Errors
    "CaptureError",
    "MissingParameterError",
    "InvalidUrlError",
    "FetchError",
    "RenderError",
]
