import asyncio
import sys
from io import BytesIO
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from PIL import Image

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from chat_previews.config import Prefetch


def _png_bytes() -> bytes:
    buf = BytesIO()
    Image.new("RGB", (4, 4), "red").save(buf, format="PNG")
    return buf.getvalue()


PNG = _png_bytes()

# in-flight request counter for /counted
LOAD = web.AppKey("load", dict)


def _html(body: str):
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text=body, content_type="text/html")

    return handler


def _slow_html(body: str, delay: float):
    async def handler(request: web.Request) -> web.Response:
        await asyncio.sleep(delay)
        return web.Response(text=body, content_type="text/html")

    return handler


def _self_html(template: str):
    """HTML whose {base} placeholder is this server's origin."""

    async def handler(request: web.Request) -> web.Response:
        base = f"{request.scheme}://{request.host}"
        return web.Response(text=template.format(base=base), content_type="text/html")

    return handler


async def _image(request: web.Request) -> web.Response:
    return web.Response(body=PNG, content_type="image/png")


def build_app() -> web.Application:
    """Pages mirroring the chat server's link preview scenarios."""

    async def octet(request):
        return web.Response(body=PNG, content_type="application/octet-stream")

    async def big_image(request):
        return web.Response(body=b"\x89PNG" + b"0" * 4096, content_type="image/png")

    async def plain(request):
        return web.Response(text="just text", content_type="text/plain")

    async def redirect(request):
        raise web.HTTPFound("/basic")

    async def loop(request):
        raise web.HTTPFound("/loop")

    async def server_error(request):
        raise web.HTTPInternalServerError()

    async def plain_with_title(request):
        return web.Response(
            text="<title>plain title</title><meta name='description' content='d'>",
            content_type="text/plain",
        )

    async def json_with_title(request):
        return web.Response(text='{"html": "<title>json</title>"}', content_type="application/json")

    async def agent(request):
        return web.Response(
            text=f"<title>{request.headers.get('User-Agent', '')}</title>", content_type="text/html"
        )

    async def counted(request):
        load = request.app[LOAD]
        load["active"] += 1
        load["peak"] = max(load["peak"], load["active"])
        try:
            await asyncio.sleep(0.2)
        finally:
            load["active"] -= 1
        return web.Response(text="<title>counted</title>", content_type="text/html")

    app = web.Application()
    app[LOAD] = {"active": 0, "peak": 0}
    app.router.add_get("/plain-title", plain_with_title)
    app.router.add_get("/json-title", json_with_title)
    app.router.add_get("/agent", agent)
    app.router.add_get("/counted", counted)
    app.router.add_get("/real-test-image.png", _image)
    app.router.add_get("/octet", octet)
    app.router.add_get("/big-image.png", big_image)
    app.router.add_get("/plain", plain)
    app.router.add_get("/redirect", redirect)
    app.router.add_get("/loop", loop)
    app.router.add_get("/broken", server_error)
    app.router.add_get(
        "/basic",
        _html("<title>test title</title><meta name='description' content='simple description'>"),
    )
    app.router.add_get(
        "/basic-og",
        _html("<title>test</title><meta property='og:title' content='opengraph test'>"),
    )
    app.router.add_get(
        "/description-og",
        _html(
            "<meta name='description' content='simple description'>"
            "<meta property='og:description' content='opengraph description'>"
        ),
    )
    app.router.add_get(
        "/invalid-thumb",
        _html("<title>test invalid image</title><meta property='og:image' content='/real-test-image.png'>"),
    )
    app.router.add_get(
        "/thumb-text",
        _self_html("<title>text thumb</title><meta property='og:image' content='{base}/plain'>"),
    )
    app.router.add_get(
        "/thumb",
        _self_html("<title>Google</title><meta property='og:image' content='{base}/real-test-image.png'>"),
    )
    app.router.add_get(
        "/thumb-no-title",
        _self_html("<meta property='og:image' content='{base}/real-test-image.png'>"),
    )
    app.router.add_get(
        "/thumb-404",
        _self_html(
            "<title>404 image</title>"
            "<meta property='og:image' content='{base}/this-image-does-not-exist.png'>"
        ),
    )
    app.router.add_get("/long", _html("<title>long page</title>" + "<p>filler</p>" * 2000))
    app.router.add_get("/one", _slow_html("<title>first title</title>", 0.3))
    app.router.add_get("/two", _html("<title>second title</title>"))
    app.router.add_get("/slow", _slow_html("<title>slow</title>", 1.0))
    return app


@pytest_asyncio.fixture
async def server():
    app = build_app()
    srv = TestServer(app)
    await srv.start_server()
    try:
        yield srv
    finally:
        await srv.close()


@pytest.fixture
def url(server):
    """``url("/basic")`` -> absolute URL on the test server."""

    def _url(path: str) -> str:
        return str(server.make_url(path))

    return _url


@pytest.fixture
def settings() -> Prefetch:
    return Prefetch.from_values(timeout=2, concurrency=4)


@pytest.fixture
def png() -> bytes:
    return PNG


@pytest.fixture
def load(server):
    """Live/peak in-flight counts seen by ``/counted``."""
    return server.app[LOAD]
