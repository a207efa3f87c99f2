"""Browser automation for webcapture."""

from .engines import (
    PLAYWRIGHT_AVAILABLE,
    PYPPETEER_AVAILABLE,
    SESSION_TYPES,
    BrowserSession,
    PlaywrightPage,
    PlaywrightSession,
    PyppeteerPage,
    PyppeteerSession,
    create_session,
    engine_available,
)
from .protocols import BrowserOptions, BrowserPage, Viewport, WaitCondition

__all__ = [
    # Interface
    "BrowserOptions",
    "BrowserPage",
    "Viewport",
    "WaitCondition",
    # Sessions
    "BrowserSession",
    "PlaywrightSession",
    "PyppeteerSession",
    "SESSION_TYPES",
    "create_session",
    "engine_available",
    # Adapters
    "PlaywrightPage",
    "PyppeteerPage",
    "PLAYWRIGHT_AVAILABLE",
    "PYPPETEER_AVAILABLE",
]
