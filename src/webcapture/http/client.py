"""Async HTTP client used for direct fetches and proxying."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType

import aiohttp
from charset_normalizer import from_bytes as detect_encoding

from .protocols import HttpResponse, HttpStream

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class AsyncHttpClient:
    """
    Async HTTP client for single-shot fetches.

    Features:
    - Buffered GET with a content size limit
    - Streamed GET for proxying large bodies
    - Intelligent encoding detection
    - Timeout controls

    Failures are raised once; the client never retries.

    Example:
        async with AsyncHttpClient() as client:
            response = await client.get("https://example.com")
            print(client.decode_content(response))
    """

    def __init__(
        self,
        max_content_size: int = 50 * 1024 * 1024,
        user_agent: str | None = None,
        proxy: str | None = None,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_content_size: Maximum buffered response size in bytes
            user_agent: Custom User-Agent string
            proxy: Proxy URL (http:// or socks5://)
            default_timeout: Default request timeout in seconds
        """
        self._max_content_size = max_content_size
        self._proxy = proxy
        self._default_timeout = default_timeout

        if user_agent is None:
            user_agent = "Mozilla/5.0 (compatible; webcapture/1.0)"
        self._user_agent = user_agent

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        connector = aiohttp.TCPConnector(
            limit=100,
            limit_per_host=10,
            ttl_dns_cache=300,
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers={"User-Agent": self._user_agent},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return self._session

    def _decode_content(self, content: bytes, content_type: str) -> str:
        """
        Decode content with intelligent encoding detection.

        Fallback chain:
        1. Content-Type header charset
        2. charset-normalizer detection
        3. UTF-8 with replacement

        Args:
            content: Raw bytes content
            content_type: Content-Type header value

        Returns:
            Decoded string
        """
        encoding = None
        if content_type:
            for part in content_type.split(";"):
                part = part.strip()
                if part.lower().startswith("charset="):
                    encoding = part.split("=", 1)[1].strip().strip("\"'")
                    break

        if encoding:
            try:
                return content.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                logger.debug(f"Failed to decode with declared encoding: {encoding}")

        try:
            best_match = detect_encoding(content).best()
            if best_match:
                logger.debug(f"Detected encoding: {best_match.encoding}")
                return str(best_match)
        except Exception as e:
            logger.debug(f"Encoding detection failed: {e}")

        return content.decode("utf-8", errors="replace")

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request and buffer the body.

        Non-success statuses are returned, not raised.

        Args:
            url: The URL to fetch
            timeout: Request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            aiohttp.ClientError: On network errors
            asyncio.TimeoutError: When the timeout elapses
            ValueError: On content size exceeded
        """
        session = self._require_session()
        timeout_val = timeout or self._default_timeout

        async with session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout_val),
            headers=headers,
            proxy=self._proxy,
            allow_redirects=True,
        ) as response:
            content_length = response.headers.get("Content-Length")
            if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
                raise ValueError(f"Content too large: {content_length} bytes")

            content = b""
            async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                content += chunk
                if len(content) > self._max_content_size:
                    raise ValueError(f"Content size limit exceeded: >{self._max_content_size} bytes")

            logger.debug(f"GET {url} -> {response.status} ({len(content)} bytes)")

            return HttpResponse(
                status_code=response.status,
                content=content,
                content_type=response.headers.get("Content-Type", ""),
                headers=dict(response.headers),
                url=str(response.url),
            )

    @asynccontextmanager
    async def stream(
        self,
        url: str,
        *,
        timeout: float | None = None,
    ) -> AsyncIterator[HttpStream]:
        """
        Open an HTTP GET request and expose the body as a chunk iterator.

        The upstream connection is released when the block exits.

        Example:
            async with client.stream(url) as upstream:
                async for chunk in upstream.iter_chunks():
                    ...
        """
        session = self._require_session()
        timeout_val = timeout or self._default_timeout

        async with session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=None, sock_read=timeout_val, sock_connect=timeout_val),
            proxy=self._proxy,
            allow_redirects=True,
        ) as response:

            async def iter_chunks() -> AsyncIterator[bytes]:
                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    yield chunk

            yield HttpStream(
                status_code=response.status,
                content_type=response.headers.get("Content-Type", ""),
                headers=dict(response.headers),
                url=str(response.url),
                iter_chunks=iter_chunks,
            )

    def decode_content(self, response: HttpResponse) -> str:
        """
        Decode response content to string.

        Convenience method that uses intelligent encoding detection.
        """
        return self._decode_content(response.content, response.content_type)
