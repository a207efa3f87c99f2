"""aiohttp web application exposing the capture endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Awaitable, Callable

from aiohttp import web

from ..core import Capturer
from ..errors import CaptureError, FetchError, InvalidUrlError, MissingParameterError
from ..models.config import CaptureConfig

logger = logging.getLogger(__name__)

CAPTURER_KEY = web.AppKey("capturer", Capturer)

# Upstream headers that do not describe the body we send back
STRIPPED_HEADERS = frozenset({"transfer-encoding", "content-encoding", "content-length"})
DEFAULT_CONTENT_TYPE = "text/plain"


class StreamAborted(Exception):
    """The upstream failed after response headers were already sent."""


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def forward_headers(upstream: Mapping[str, str]) -> dict[str, str]:
    """
    Copy upstream headers for the client, dropping encoding and length.

    ``Content-Type`` defaults to text/plain when the upstream sent none.
    """
    headers = {
        name: value
        for name, value in upstream.items()
        if name.lower() not in STRIPPED_HEADERS and name.lower() != "content-type"
    }
    content_type = next(
        (value for name, value in upstream.items() if name.lower() == "content-type" and value),
        DEFAULT_CONTENT_TYPE,
    )
    headers["Content-Type"] = content_type
    return headers


def error_status(error: CaptureError) -> int:
    """Map a capture error to the HTTP status returned to the client.

    Bad input is a 400 and upstream fetch failures are a 502. Browser
    failures (RenderError) and anything else are a 500.
    """
    if isinstance(error, (MissingParameterError, InvalidUrlError)):
        return 400
    if isinstance(error, FetchError):
        return 502
    return 500


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Turn capture errors into plain-text error responses."""
    try:
        return await handler(request)
    except (web.HTTPException, StreamAborted):
        raise
    except CaptureError as e:
        status = error_status(e)
        if status >= 500:
            logger.error(f"{request.path} failed for {request.query.get('url')!r}: {e}")
        return web.Response(status=status, text=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error handling {request.path}: {e}")
        return web.Response(status=500, text="Internal server error")


def _engine_param(request: web.Request) -> str | None:
    return request.query.get("engine") or request.query.get("browser")


async def html_handler(request: web.Request) -> web.Response:
    capturer = request.app[CAPTURER_KEY]
    html = await capturer.get_html(request.query.get("url"), _engine_param(request))
    return web.Response(text=html, content_type="text/html", charset="utf-8")


async def markdown_handler(request: web.Request) -> web.Response:
    capturer = request.app[CAPTURER_KEY]
    markdown = await capturer.get_markdown(request.query.get("url"))
    return web.Response(text=markdown, content_type="text/markdown", charset="utf-8")


async def image_handler(request: web.Request) -> web.Response:
    capturer = request.app[CAPTURER_KEY]
    png = await capturer.get_screenshot(request.query.get("url"), _engine_param(request))
    return web.Response(
        body=png,
        content_type="image/png",
        headers={"Content-Disposition": 'inline; filename="screenshot.png"'},
    )


async def fetch_handler(request: web.Request) -> web.Response:
    """Proxy the upstream response with its status, buffered."""
    capturer = request.app[CAPTURER_KEY]
    upstream = await capturer.proxy_fetch(request.query.get("url"))
    return web.Response(
        status=upstream.status_code,
        body=upstream.content,
        headers=forward_headers(upstream.headers),
    )


async def stream_handler(request: web.Request) -> web.StreamResponse:
    """
    Proxy the upstream response with its status, chunk by chunk.

    Once headers are sent a failure can only abort the connection.
    """
    capturer = request.app[CAPTURER_KEY]
    async with capturer.stream(request.query.get("url")) as upstream:
        response = web.StreamResponse(
            status=upstream.status_code,
            headers=forward_headers(upstream.headers),
        )
        response.enable_chunked_encoding()

        await response.prepare(request)
        try:
            async for chunk in upstream.iter_chunks():
                await response.write(chunk)
            await response.write_eof()
        except Exception as e:
            logger.error(f"Stream from {upstream.url} aborted: {e}")
            raise StreamAborted(str(e)) from e

        return response


def _capturer_context(config: CaptureConfig) -> Callable[[web.Application], AsyncIterator[None]]:
    async def capturer_ctx(app: web.Application) -> AsyncIterator[None]:
        async with Capturer(config) as capturer:
            app[CAPTURER_KEY] = capturer
            yield

    return capturer_ctx


def create_app(config: CaptureConfig | None = None, capturer: Capturer | None = None) -> web.Application:
    """
    Build the web application.

    Args:
        config: Configuration for the capturer the app creates
        capturer: Use this capturer instead of creating one; the caller
            keeps ownership of it

    Returns:
        aiohttp Application with /html, /markdown, /image, /fetch and /stream
    """
    app = web.Application(middlewares=[error_middleware])

    if capturer is None:
        app.cleanup_ctx.append(_capturer_context(config or CaptureConfig()))
    else:
        app[CAPTURER_KEY] = capturer

    app.router.add_get("/html", html_handler)
    app.router.add_get("/markdown", markdown_handler)
    app.router.add_get("/image", image_handler)
    app.router.add_get("/fetch", fetch_handler)
    app.router.add_get("/stream", stream_handler)
    return app


def run_server(config: CaptureConfig, print_fn: Callable[[str], None] | None = None) -> None:
    """
    Serve the API until interrupted.

    Args:
        config: Server and capture configuration
        print_fn: Receives the startup banner lines (defaults to print)
    """
    host, port = config.server.host, config.server.port
    logger.info(f"Starting server on {host}:{port}")
    web.run_app(
        create_app(config),
        host=host,
        port=port,
        print=print_fn or print,
        access_log=logging.getLogger("webcapture.access"),
    )
