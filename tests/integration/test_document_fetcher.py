"""DocumentFetcher against a local aiohttp server."""

import asyncio
import socket
from unittest.mock import Mock

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from regiosync.common.http import DocumentFetcher, HttpStatusError, TransportError

pytestmark = pytest.mark.integration

USER_AGENT = "Mozilla/5.0 (compatible; SmallClubManager/1.0)"


async def _club(request: web.Request) -> web.Response:
    body = f"<h1>Wisła Kraków</h1><p>{request.headers.get('User-Agent')}|{request.headers.get('Accept')}</p>"
    return web.Response(text=body, content_type="text/html")


async def _missing(request: web.Request) -> web.Response:
    return web.Response(status=404, text="nie znaleziono")


async def _throttled(request: web.Request) -> web.Response:
    return web.Response(status=429, headers={"Retry-After": "15"})


async def _throttled_no_header(request: web.Request) -> web.Response:
    return web.Response(status=429)


async def _broken_bytes(request: web.Request) -> web.Response:
    body = "<h1>Wisła Kraków</h1><p>".encode("utf-8") + b"\xff\xfe</p>"
    return web.Response(body=body, content_type="text/html", charset="utf-8")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(1.0)
    return web.Response(text="za późno")


@pytest_asyncio.fixture
async def server():
    app = web.Application()
    app.router.add_get("/druzyna/", _club)
    app.router.add_get("/missing/", _missing)
    app.router.add_get("/throttled/", _throttled)
    app.router.add_get("/throttled-bare/", _throttled_no_header)
    app.router.add_get("/broken/", _broken_bytes)
    app.router.add_get("/slow/", _slow)
    srv = test_utils.TestServer(app)
    await srv.start_server()
    yield srv
    await srv.close()


def _make_fetcher(timeout: float) -> DocumentFetcher:
    return DocumentFetcher(
        user_agent=USER_AGENT,
        accept="text/html",
        timeout=timeout,
        rate_limiter=Mock(),
        rate_limit_backoff=60.0,
        metrics=Mock(),
    )


@pytest_asyncio.fixture
async def fetcher():
    async with _make_fetcher(timeout=5) as f:
        yield f


@pytest.mark.asyncio
async def test_fetch_returns_body_and_sends_headers(server, fetcher):
    html = await fetcher.fetch(str(server.make_url("/druzyna/")), page="details")
    assert "<h1>Wisła Kraków</h1>" in html
    assert f"{USER_AGENT}|text/html" in html
    page, status, duration = fetcher.metrics.record_fetch.call_args.args
    assert (page, status) == ("details", "200")
    assert duration >= 0


@pytest.mark.asyncio
async def test_invalid_utf8_bytes_are_replaced_not_fatal(server, fetcher):
    html = await fetcher.fetch(str(server.make_url("/broken/")), page="details")
    assert "<h1>Wisła Kraków</h1>" in html
    assert "�" in html
    assert fetcher.metrics.record_fetch.call_args.args[:2] == ("details", "200")


@pytest.mark.asyncio
async def test_non_2xx_raises_status_error(server, fetcher):
    url = str(server.make_url("/missing/"))
    with pytest.raises(HttpStatusError) as excinfo:
        await fetcher.fetch(url, page="table")
    assert excinfo.value.status == 404
    assert excinfo.value.url == url
    assert str(excinfo.value) == "HTTP 404"
    fetcher.rate_limiter.penalize.assert_not_called()
    fetcher.metrics.record_fetch.assert_called_once()
    assert fetcher.metrics.record_fetch.call_args.args[:2] == ("table", "404")


@pytest.mark.asyncio
async def test_429_penalizes_limiter_with_retry_after(server, fetcher):
    with pytest.raises(HttpStatusError) as excinfo:
        await fetcher.fetch(str(server.make_url("/throttled/")))
    assert excinfo.value.retry_after == 15.0
    fetcher.rate_limiter.penalize.assert_called_once_with(15.0)


@pytest.mark.asyncio
async def test_429_without_retry_after_uses_backoff(server, fetcher):
    with pytest.raises(HttpStatusError):
        await fetcher.fetch(str(server.make_url("/throttled-bare/")))
    fetcher.rate_limiter.penalize.assert_called_once_with(60.0)


@pytest.mark.asyncio
async def test_connection_refused_is_transport_error(fetcher):
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    with pytest.raises(TransportError):
        await fetcher.fetch(f"http://127.0.0.1:{port}/", page="search")
    assert fetcher.metrics.record_fetch.call_args.args[:2] == ("search", "transport_error")


@pytest.mark.asyncio
async def test_request_timeout_is_transport_error(server):
    async with _make_fetcher(timeout=0.2) as slow_fetcher:
        with pytest.raises(TransportError) as excinfo:
            await slow_fetcher.fetch(str(server.make_url("/slow/")), page="table")
        assert "Timeout" in str(excinfo.value)
        page, status, duration = slow_fetcher.metrics.record_fetch.call_args.args
        assert (page, status) == ("table", "transport_error")
        assert duration < 1.0


@pytest.mark.asyncio
async def test_external_session_is_not_closed():
    session = aiohttp.ClientSession()
    try:
        fetcher = DocumentFetcher(user_agent=USER_AGENT, session=session)
        await fetcher.initialize()
        await fetcher.cleanup()
        assert not session.closed
    finally:
        await session.close()
