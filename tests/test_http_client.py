"""
Tests for the aiohttp transport against a local test server.
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from dead_link_monitor.transport.http_client import FetchResponse, HTTPClient
from dead_link_monitor.utils.errors import TransportError


def build_app():
    async def ok(request):
        return web.Response(text="ok", headers={"X-Agent": request.headers.get("User-Agent", "")})

    async def missing(request):
        return web.Response(status=404)

    async def moved(request):
        raise web.HTTPMovedPermanently(location="/ok")

    async def slow(request):
        await asyncio.sleep(1)
        return web.Response(text="late")

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/missing", missing)
    app.router.add_get("/moved", moved)
    app.router.add_get("/slow", slow)
    return app


def fetch_all(paths, timeout=5.0):
    """Start a server, fetch ``paths`` and return responses or errors in order."""

    async def scenario():
        server = TestServer(build_app())
        await server.start_server()
        outcomes = []
        try:
            async with HTTPClient(timeout=timeout, user_agent="probe/1.0") as client:
                for path in paths:
                    try:
                        outcomes.append(await client.get(str(server.make_url(path))))
                    except TransportError as e:
                        outcomes.append(e)
        finally:
            await server.close()
        return outcomes

    return asyncio.run(scenario())


def test_status_codes_are_reported():
    ok, missing = fetch_all(["/ok", "/missing"])

    assert ok.status == 200
    assert ok.header("x-agent") == "probe/1.0"
    assert missing.status == 404


def test_redirects_are_not_followed():
    (moved,) = fetch_all(["/moved"])

    assert moved.status == 301
    assert moved.header("Location") == "/ok"


def test_timeout_becomes_transport_error():
    (outcome,) = fetch_all(["/slow"], timeout=0.1)

    assert isinstance(outcome, TransportError)
    assert "Timed out" in outcome.message


def test_connection_refused_becomes_transport_error():
    async def scenario():
        async with HTTPClient(timeout=5.0) as client:
            await client.get("http://127.0.0.1:1/")

    with pytest.raises(TransportError):
        asyncio.run(scenario())


def test_get_requires_open_client():
    with pytest.raises(TransportError):
        asyncio.run(HTTPClient().get("https://example.test/"))


def test_header_lookup_is_case_insensitive():
    response = FetchResponse(status=302, headers={"Location": "https://y.test"})

    assert response.header("location") == "https://y.test"
    assert response.header("LOCATION") == "https://y.test"
    assert response.header("Content-Type") is None
