"""Browser engine adapters and scoped browser sessions."""

from __future__ import annotations

import contextlib
import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import TYPE_CHECKING, Any

from ..models.capture import BrowserEngine
from .protocols import BrowserOptions, BrowserPage, Viewport, WaitCondition

logger = logging.getLogger(__name__)

# Check for Playwright availability
PLAYWRIGHT_AVAILABLE = False
try:
    from playwright.async_api import async_playwright

    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    pass

# Check for pyppeteer availability
PYPPETEER_AVAILABLE = False
try:
    from pyppeteer import launch as pyppeteer_launch

    PYPPETEER_AVAILABLE = True
except ImportError:
    pass

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright


class PlaywrightPage:
    """BrowserPage adapter over a Playwright page."""

    engine_name = "playwright"

    _WAIT_UNTIL = {
        WaitCondition.LOAD: "load",
        WaitCondition.DOM_CONTENT_LOADED: "domcontentloaded",
        WaitCondition.NETWORK_IDLE: "networkidle",
    }

    def __init__(self, page: Page) -> None:
        self._page = page
        self._headers: dict[str, str] = {}

    async def set_headers(self, headers: dict[str, str]) -> None:
        # Playwright replaces the whole header set on every call.
        self._headers.update(headers)
        await self._page.set_extra_http_headers(self._headers)

    async def set_user_agent(self, user_agent: str) -> None:
        # Pages have no user-agent setter; send it as a header instead.
        await self.set_headers({"User-Agent": user_agent})

    async def set_viewport(self, viewport: Viewport) -> None:
        await self._page.set_viewport_size({"width": viewport.width, "height": viewport.height})

    async def navigate(
        self,
        url: str,
        *,
        wait_until: WaitCondition = WaitCondition.NETWORK_IDLE,
        timeout_ms: float = 30000,
    ) -> None:
        await self._page.goto(url, wait_until=self._WAIT_UNTIL[wait_until], timeout=timeout_ms)

    async def content(self) -> str:
        html: str = await self._page.content()
        return html

    async def screenshot(self) -> bytes:
        data: bytes = await self._page.screenshot(type="png", full_page=False)
        return data

    async def close(self) -> None:
        await self._page.close()


class PyppeteerPage:
    """BrowserPage adapter over a pyppeteer (Puppeteer port) page."""

    engine_name = "puppeteer"

    _WAIT_UNTIL = {
        WaitCondition.LOAD: "load",
        WaitCondition.DOM_CONTENT_LOADED: "domcontentloaded",
        WaitCondition.NETWORK_IDLE: "networkidle0",
    }

    def __init__(self, page: Any) -> None:
        self._page = page

    async def set_headers(self, headers: dict[str, str]) -> None:
        await self._page.setExtraHTTPHeaders(headers)

    async def set_user_agent(self, user_agent: str) -> None:
        await self._page.setUserAgent(user_agent)

    async def set_viewport(self, viewport: Viewport) -> None:
        await self._page.setViewport({"width": viewport.width, "height": viewport.height})

    async def navigate(
        self,
        url: str,
        *,
        wait_until: WaitCondition = WaitCondition.NETWORK_IDLE,
        timeout_ms: float = 30000,
    ) -> None:
        await self._page.goto(url, waitUntil=self._WAIT_UNTIL[wait_until], timeout=timeout_ms)

    async def content(self) -> str:
        html: str = await self._page.content()
        return html

    async def screenshot(self) -> bytes:
        data: bytes = await self._page.screenshot(type="png", fullPage=False)
        return data

    async def close(self) -> None:
        await self._page.close()


class BrowserSession(ABC):
    """
    One browser process and one page, released together.

    Entering the session launches the browser, opens a page and applies
    headers, user agent and viewport. Leaving it, normally or through an
    exception, closes the page and the browser.

    Example:
        async with create_session(BrowserEngine.PLAYWRIGHT) as page:
            await page.navigate("https://example.com")
            html = await page.content()
    """

    engine: BrowserEngine

    def __init__(self, options: BrowserOptions | None = None) -> None:
        self._options = options or BrowserOptions()
        self._page: BrowserPage | None = None

    @abstractmethod
    async def _launch(self) -> None:
        """Start the browser."""

    @abstractmethod
    async def _new_page(self) -> BrowserPage:
        """Open a page in the launched browser."""

    @abstractmethod
    async def _shutdown(self) -> None:
        """Close the browser and its driver; must tolerate a partial launch."""

    async def __aenter__(self) -> BrowserPage:
        try:
            await self._launch()
            page = await self._new_page()
            self._page = page

            if self._options.extra_headers:
                await page.set_headers(dict(self._options.extra_headers))
            if self._options.user_agent:
                await page.set_user_agent(self._options.user_agent)
            await page.set_viewport(self._options.viewport)
        except BaseException:
            await self._release()
            raise

        logger.debug(f"{self.engine.value} session opened")
        return page

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._release()

    async def _release(self) -> None:
        if self._page is not None:
            with contextlib.suppress(Exception):
                await self._page.close()
            self._page = None

        await self._shutdown()
        logger.debug(f"{self.engine.value} session closed")


class PlaywrightSession(BrowserSession):
    """Chromium driven through Playwright. Requires: pip install web-capture[playwright]"""

    engine = BrowserEngine.PLAYWRIGHT

    def __init__(self, options: BrowserOptions | None = None) -> None:
        super().__init__(options)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def _launch(self) -> None:
        if not PLAYWRIGHT_AVAILABLE:
            raise ImportError(
                "Playwright is required for the playwright engine. "
                "Install with: pip install web-capture[playwright]"
            )
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._options.headless,
            args=list(self._options.launch_args),
        )

    async def _new_page(self) -> BrowserPage:
        if self._browser is None:
            raise RuntimeError("Browser not launched")
        return PlaywrightPage(await self._browser.new_page())

    async def _shutdown(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None


class PyppeteerSession(BrowserSession):
    """Chromium driven through pyppeteer. Requires: pip install web-capture[puppeteer]"""

    engine = BrowserEngine.PUPPETEER

    def __init__(self, options: BrowserOptions | None = None) -> None:
        super().__init__(options)
        self._browser: Any = None

    async def _launch(self) -> None:
        if not PYPPETEER_AVAILABLE:
            raise ImportError(
                "pyppeteer is required for the puppeteer engine. "
                "Install with: pip install web-capture[puppeteer]"
            )
        # Signal handling belongs to the host process, not the browser.
        self._browser = await pyppeteer_launch(
            headless=self._options.headless,
            args=list(self._options.launch_args),
            handleSIGINT=False,
            handleSIGTERM=False,
            handleSIGHUP=False,
        )

    async def _new_page(self) -> BrowserPage:
        if self._browser is None:
            raise RuntimeError("Browser not launched")
        return PyppeteerPage(await self._browser.newPage())

    async def _shutdown(self) -> None:
        if self._browser is not None:
            browser, self._browser = self._browser, None
            await browser.close()


SESSION_TYPES: dict[BrowserEngine, type[BrowserSession]] = {
    BrowserEngine.PUPPETEER: PyppeteerSession,
    BrowserEngine.PLAYWRIGHT: PlaywrightSession,
}


def create_session(engine: BrowserEngine, options: BrowserOptions | None = None) -> BrowserSession:
    """Create an unopened session for ``engine``."""
    return SESSION_TYPES[engine](options)


def engine_available(engine: BrowserEngine) -> bool:
    """Return True if the library behind ``engine`` is importable."""
    if engine is BrowserEngine.PLAYWRIGHT:
        return PLAYWRIGHT_AVAILABLE
    return PYPPETEER_AVAILABLE
