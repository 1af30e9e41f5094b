from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from raspinfo._transport import HttpTransport
from raspinfo.exceptions import UpstreamError


async def _ok(request: web.Request) -> web.Response:
    return web.json_response({"key": request.headers.get("digitransit-subscription-key"), "q": request.query.get("q")})


async def _echo(request: web.Request) -> web.Response:
    return web.json_response(await request.json())


async def _broken(request: web.Request) -> web.Response:
    return web.Response(status=503, text="maintenance")


async def _not_json(request: web.Request) -> web.Response:
    return web.Response(text="<html>")


async def _not_utf8(request: web.Request) -> web.Response:
    return web.Response(body=b"\xff\xfe\xfa", content_type="application/json", charset="utf-8")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1)
    return web.Response(text="late")


@pytest_asyncio.fixture
async def server() -> AsyncIterator[TestServer]:
    app = web.Application()
    app.router.add_get("/ok", _ok)
    app.router.add_post("/echo", _echo)
    app.router.add_get("/broken", _broken)
    app.router.add_get("/text", _not_json)
    app.router.add_get("/slow", _slow)
    app.router.add_get("/bytes", _not_utf8)
    async with TestServer(app) as test_server:
        yield test_server


@pytest.mark.asyncio
async def test_get_json_passes_params_and_headers(server: TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session)
        body = await transport.get_json(
            str(server.make_url("/ok")),
            source="HSL",
            params={"q": "E2185"},
            headers={"digitransit-subscription-key": "k"},
        )
    assert body == {"key": "k", "q": "E2185"}


@pytest.mark.asyncio
async def test_post_json_round_trips_payload(server: TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        body = await HttpTransport(session).post_json(
            str(server.make_url("/echo")), {"query": "{ x }", "variables": {"s0": "HSL:1"}}, source="HSL"
        )
    assert body == {"query": "{ x }", "variables": {"s0": "HSL:1"}}


@pytest.mark.asyncio
async def test_non_200_raises_with_status(server: TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        with pytest.raises(UpstreamError) as exc_info:
            await HttpTransport(session).get_text(str(server.make_url("/broken")), source="FMI")
    assert exc_info.value.status_code == 503
    assert exc_info.value.source == "FMI"
    assert str(exc_info.value) == "FMI api returned status: 503"


@pytest.mark.asyncio
async def test_invalid_json_raises(server: TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        with pytest.raises(UpstreamError, match="failed to decode Electricity json"):
            await HttpTransport(session).get_json(str(server.make_url("/text")), source="Electricity")


@pytest.mark.asyncio
async def test_undecodable_body_raises(server: TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        with pytest.raises(UpstreamError, match="failed to decode geocoding response"):
            await HttpTransport(session).get_json(str(server.make_url("/bytes")), source="geocoding")


@pytest.mark.asyncio
async def test_timeout_raises(server: TestServer) -> None:
    async with aiohttp.ClientSession() as session:
        with pytest.raises(UpstreamError, match="timed out"):
            await HttpTransport(session, timeout=0.1).get_text(str(server.make_url("/slow")), source="FMI")


@pytest.mark.asyncio
async def test_connection_error_raises() -> None:
    async with aiohttp.ClientSession() as session:
        with pytest.raises(UpstreamError, match="failed to fetch HSL data"):
            await HttpTransport(session, timeout=2).get_text("http://127.0.0.1:1/", source="HSL")
