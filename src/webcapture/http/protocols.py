"""Protocol definitions for HTTP client abstraction."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Callable, Protocol


@dataclass(frozen=True)
class HttpResponse:
    """
    Immutable HTTP response returned by HttpClient.

    Attributes:
        status_code: HTTP status code (200, 404, etc.)
        content: Raw response content as bytes
        content_type: Content-Type header value
        headers: All response headers
        url: Final URL after any redirects
    """

    status_code: int
    content: bytes
    content_type: str
    headers: dict[str, str]
    url: str

    @property
    def ok(self) -> bool:
        """True for 2xx and 3xx statuses."""
        return self.status_code < 400


@dataclass(frozen=True)
class HttpStream:
    """
    Upstream response whose body has not been read yet.

    Only valid inside the ``async with client.stream(url)`` block that
    produced it.
    """

    status_code: int
    content_type: str
    headers: dict[str, str]
    url: str
    iter_chunks: Callable[[], AsyncIterator[bytes]]


class HttpClient(Protocol):
    """
    Protocol for HTTP clients.

    Lets the capturer run against mock implementations in tests.
    """

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request and buffer the body.

        Raises:
            Exception on network errors or when the size limit is exceeded
        """
        ...

    def stream(
        self,
        url: str,
        *,
        timeout: float | None = None,
    ) -> AbstractAsyncContextManager[HttpStream]:
        """Open an HTTP GET request without buffering the body."""
        ...

    def decode_content(self, response: HttpResponse) -> str:
        """Decode response content to string."""
        ...
