"""Tests for the async HTTP client."""

import pytest
from aiohttp import test_utils, web

from webcapture.http import AsyncHttpClient, HttpResponse


def _make_app() -> web.Application:
    async def page(request: web.Request) -> web.Response:
        return web.Response(text="<html><body>hi</body></html>", content_type="text/html")

    async def missing(request: web.Request) -> web.Response:
        return web.Response(status=404, text="nope")

    async def large(request: web.Request) -> web.Response:
        return web.Response(body=b"x" * 4096)

    async def agent(request: web.Request) -> web.Response:
        return web.Response(text=request.headers.get("User-Agent", ""))

    app = web.Application()
    app.router.add_get("/page", page)
    app.router.add_get("/missing", missing)
    app.router.add_get("/large", large)
    app.router.add_get("/agent", agent)
    return app


def _response(content: bytes, content_type: str = "") -> HttpResponse:
    return HttpResponse(status_code=200, content=content, content_type=content_type, headers={}, url="https://example.com")


class TestAsyncHttpClient:
    """Tests for AsyncHttpClient against a local server."""

    @pytest.mark.asyncio
    async def test_get(self):
        """Test a buffered GET."""
        async with test_utils.TestServer(_make_app()) as server:
            async with AsyncHttpClient() as client:
                response = await client.get(str(server.make_url("/page")))

        assert response.status_code == 200
        assert response.ok
        assert response.content == b"<html><body>hi</body></html>"
        assert response.content_type.startswith("text/html")

    @pytest.mark.asyncio
    async def test_error_status_returned(self):
        """Test that error statuses are returned rather than raised."""
        async with test_utils.TestServer(_make_app()) as server:
            async with AsyncHttpClient() as client:
                response = await client.get(str(server.make_url("/missing")))

        assert response.status_code == 404
        assert not response.ok
        assert response.content == b"nope"

    @pytest.mark.asyncio
    async def test_size_limit(self):
        """Test that oversized bodies are rejected."""
        async with test_utils.TestServer(_make_app()) as server:
            async with AsyncHttpClient(max_content_size=1024) as client:
                with pytest.raises(ValueError):
                    await client.get(str(server.make_url("/large")))

    @pytest.mark.asyncio
    async def test_user_agent(self):
        """Test that the configured User-Agent is sent."""
        async with test_utils.TestServer(_make_app()) as server:
            async with AsyncHttpClient(user_agent="webcapture-test/1.0") as client:
                response = await client.get(str(server.make_url("/agent")))

        assert response.content == b"webcapture-test/1.0"

    @pytest.mark.asyncio
    async def test_stream(self):
        """Test that a streamed body arrives complete."""
        async with test_utils.TestServer(_make_app()) as server:
            async with AsyncHttpClient(max_content_size=1024) as client:
                async with client.stream(str(server.make_url("/large"))) as upstream:
                    chunks = [chunk async for chunk in upstream.iter_chunks()]

        assert upstream.status_code == 200
        assert b"".join(chunks) == b"x" * 4096

    @pytest.mark.asyncio
    async def test_requires_context(self):
        """Test that requests outside the context manager fail clearly."""
        client = AsyncHttpClient()

        with pytest.raises(RuntimeError, match="not initialized"):
            await client.get("https://example.com")


class TestDecodeContent:
    """Tests for content decoding."""

    def test_header_charset(self):
        """Test that the Content-Type charset is used first."""
        client = AsyncHttpClient()

        text = client.decode_content(_response("café".encode("latin-1"), "text/html; charset=ISO-8859-1"))

        assert text == "café"

    def test_utf8_without_header(self):
        """Test that UTF-8 bodies decode without a declared charset."""
        client = AsyncHttpClient()

        body = "<p>Un café naïve, le résumé de la soirée était très réussi.</p>"

        text = client.decode_content(_response(body.encode("utf-8")))

        assert text == body

    def test_bad_declared_charset_falls_back(self):
        """Test that an unknown declared charset falls back to detection."""
        client = AsyncHttpClient()

        text = client.decode_content(_response(b"plain ascii", "text/plain; charset=x-bogus"))

        assert text == "plain ascii"
