"""Capture orchestrator: fetch or render a page and produce one artifact."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Callable, Union
from urllib.parse import urlparse

from ..browser import BrowserOptions, BrowserPage, BrowserSession, Viewport, WaitCondition, create_session
from ..conversion import (
    choose_render_strategy,
    convert_html_to_markdown,
    convert_relative_urls,
    normalize_charset,
)
from ..errors import CaptureError, FetchError, InvalidUrlError, MissingParameterError, RenderError
from ..http import AsyncHttpClient, HttpClient, HttpResponse, HttpStream
from ..models.capture import BrowserEngine, OutputFormat, RenderDecision
from ..models.config import CaptureConfig

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
ALLOWED_SCHEMES = {"http", "https"}

_HAS_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")

SessionFactory = Callable[[BrowserEngine, BrowserOptions], BrowserSession]
CaptureResult = Union[str, bytes]


def normalize_url(url: str | None) -> str:
    """
    Trim a user-supplied URL and make it absolute.

    URLs without a scheme are assumed to be https.

    Raises:
        MissingParameterError: If the URL is missing or blank
        InvalidUrlError: If the URL is not a usable http(s) URL
    """
    if url is None or not url.strip():
        raise MissingParameterError("Missing `url` parameter")

    url = url.strip()
    if url.startswith("//"):
        url = f"https:{url}"
    elif not _HAS_SCHEME.match(url):
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL: {url}") from e

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError(f"Unsupported URL scheme: {parsed.scheme}")
    if not parsed.hostname:
        raise InvalidUrlError(f"URL has no host: {url}")

    return url


class Capturer:
    """
    Produces HTML, Markdown, screenshots and proxied bytes for a URL.

    The capturer owns an HTTP client for direct fetches and opens a fresh
    browser session for every browser-backed capture. Nothing is shared
    between captures besides the HTTP connection pool.

    Example:
        async with Capturer(CaptureConfig()) as capturer:
            markdown = await capturer.get_markdown("https://example.com")
            png = await capturer.get_screenshot("example.com", BrowserEngine.PLAYWRIGHT)
    """

    def __init__(
        self,
        config: CaptureConfig | None = None,
        http_client: HttpClient | None = None,
        session_factory: SessionFactory | None = None,
    ):
        """
        Initialize the Capturer.

        Args:
            config: Capture configuration (defaults if None)
            http_client: Client for direct fetches; created on enter if None
            session_factory: Builds a browser session for an engine
        """
        self.config = config or CaptureConfig()
        self._http_client = http_client
        self._owns_client = http_client is None
        self._session_factory: SessionFactory = session_factory or create_session

    async def __aenter__(self) -> Capturer:
        """Enter async context and create the HTTP client if needed."""
        if self._http_client is None:
            network = self.config.network
            client = AsyncHttpClient(
                max_content_size=network.max_content_size,
                user_agent=network.user_agent,
                proxy=network.proxy,
                default_timeout=network.timeout,
            )
            await client.__aenter__()
            self._http_client = client
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the client if this capturer created it."""
        if self._owns_client and isinstance(self._http_client, AsyncHttpClient):
            await self._http_client.__aexit__(exc_type, exc_val, exc_tb)
            self._http_client = None

    @property
    def http_client(self) -> HttpClient:
        if self._http_client is None:
            raise RuntimeError("Capturer not initialized. Use 'async with' context manager.")
        return self._http_client

    def resolve_engine(self, engine: BrowserEngine | str | None) -> BrowserEngine:
        """Resolve an engine name or alias, defaulting to the configured engine."""
        if isinstance(engine, BrowserEngine):
            return engine
        return BrowserEngine.parse(engine, default=self.config.browser.engine)

    def browser_options(self) -> BrowserOptions:
        """Build per-page browser options from the configuration."""
        browser = self.config.browser
        return BrowserOptions(
            headless=browser.headless,
            viewport=Viewport(width=browser.viewport_width, height=browser.viewport_height),
            user_agent=browser.user_agent,
            extra_headers=dict(browser.extra_headers),
        )

    async def _fetch(self, url: str) -> HttpResponse:
        try:
            return await self.http_client.get(url)
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout fetching {url}")
            raise FetchError(f"Timed out fetching {url}") from e
        except Exception as e:
            logger.error(f"Error fetching {url}: {e}")
            raise FetchError(f"Error fetching {url}: {e}") from e

    async def _fetch_text(self, url: str) -> str:
        """Fetch ``url`` and decode the body; error statuses raise FetchError."""
        response = await self._fetch(url)
        if not response.ok:
            logger.error(f"HTTP {response.status_code} fetching {url}")
            raise FetchError(f"HTTP {response.status_code} fetching {url}", status_code=response.status_code)
        return self.http_client.decode_content(response)

    @asynccontextmanager
    async def _open_page(self, url: str, engine: BrowserEngine) -> AsyncIterator[BrowserPage]:
        """
        Launch a browser, load ``url`` and wait for it to settle.

        The page and browser are closed when the block exits, whether or
        not it raised.
        """
        browser = self.config.browser
        session = self._session_factory(engine, self.browser_options())

        try:
            async with session as page:
                try:
                    await page.navigate(
                        url,
                        wait_until=WaitCondition.NETWORK_IDLE,
                        timeout_ms=browser.navigation_timeout * 1000,
                    )
                    if browser.settle_delay:
                        await asyncio.sleep(browser.settle_delay)
                except Exception as e:
                    logger.error(f"Navigation to {url} failed ({engine.value}): {e}")
                    raise RenderError(f"Navigation to {url} failed: {e}") from e

                yield page
        except CaptureError:
            raise
        except ImportError as e:
            raise RenderError(str(e)) from e
        except Exception as e:
            logger.error(f"Browser error for {url} ({engine.value}): {e}")
            raise RenderError(f"Browser error: {e}") from e

    async def _render_html(self, url: str, engine: BrowserEngine) -> str:
        logger.info(f"Rendering {url} with {engine.value}")
        async with self._open_page(url, engine) as page:
            try:
                return await page.content()
            except Exception as e:
                raise RenderError(f"Could not read rendered content: {e}") from e

    async def get_html(self, url: str | None, engine: BrowserEngine | str | None = None) -> str:
        """
        Return the page as UTF-8 HTML with absolute URLs.

        The body is fetched directly first; pages that are not a complete
        HTML document, or that contain scripts, are rendered in a browser
        instead.

        Raises:
            FetchError: If the direct fetch fails
            RenderError: If the browser render fails
        """
        url = normalize_url(url)
        body = await self._fetch_text(url)

        decision = choose_render_strategy(body)
        logger.debug(f"Render decision for {url}: {decision.value}")

        if decision is RenderDecision.RENDER_REQUIRED:
            body = await self._render_html(url, self.resolve_engine(engine))

        return convert_relative_urls(normalize_charset(body), url)

    async def get_markdown(self, url: str | None) -> str:
        """
        Return the page as Markdown.

        Markdown is always built from the directly fetched body, never a
        browser render.
        """
        url = normalize_url(url)
        body = await self._fetch_text(url)
        return convert_html_to_markdown(body, url)

    async def get_screenshot(self, url: str | None, engine: BrowserEngine | str | None = None) -> bytes:
        """
        Return a PNG screenshot of the viewport after the page settles.

        Raises:
            RenderError: If the browser fails or does not return a PNG
        """
        url = normalize_url(url)
        resolved = self.resolve_engine(engine)
        logger.info(f"Capturing screenshot of {url} with {resolved.value}")

        async with self._open_page(url, resolved) as page:
            try:
                data = await page.screenshot()
            except Exception as e:
                raise RenderError(f"Screenshot failed: {e}") from e

        if not isinstance(data, (bytes, bytearray)) or not bytes(data).startswith(PNG_SIGNATURE):
            raise RenderError("Browser did not return a PNG image")
        return bytes(data)

    async def proxy_fetch(self, url: str | None) -> HttpResponse:
        """Fetch ``url`` as-is; the upstream status is passed through."""
        url = normalize_url(url)
        return await self._fetch(url)

    @asynccontextmanager
    async def stream(self, url: str | None) -> AsyncIterator[HttpStream]:
        """
        Open ``url`` for streaming; the upstream status is passed through.

        Example:
            async with capturer.stream(url) as upstream:
                async for chunk in upstream.iter_chunks():
                    ...
        """
        url = normalize_url(url)
        opened = False
        try:
            async with self.http_client.stream(url) as upstream:
                opened = True
                yield upstream
        except Exception as e:
            if opened:
                raise
            logger.error(f"Error opening stream for {url}: {e}")
            raise FetchError(f"Error fetching {url}: {e}") from e

    async def capture(
        self,
        url: str,
        output_format: OutputFormat | str = OutputFormat.HTML,
        engine: BrowserEngine | str | None = None,
    ) -> CaptureResult:
        """
        Capture ``url`` in the requested format.

        Returns:
            HTML or Markdown text, or PNG bytes for images
        """
        if not isinstance(output_format, OutputFormat):
            output_format = OutputFormat.parse(output_format)

        if output_format is OutputFormat.MARKDOWN:
            return await self.get_markdown(url)
        if output_format is OutputFormat.IMAGE:
            return await self.get_screenshot(url, engine)
        return await self.get_html(url, engine)
