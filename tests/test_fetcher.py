# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio

import aiohttp
import pytest
from aiohttp import web

import site_digest.crawler.fetcher as fetcher_module
from site_digest.config import CrawlerConfig
from site_digest.crawler.fetcher import Fetcher
from site_digest.errors import BlockedSiteError, CrawlCancelledError, FetchTimeoutError


@pytest.mark.asyncio()
async def test_fetch_returns_body_and_sends_browser_headers(serve, config):
    seen = {}

    async def echo(request: web.Request) -> web.Response:
        seen["headers"] = request.headers.copy()
        return web.Response(text="<html><title>Hi</title></html>", content_type="text/html")

    base = await serve({"/": echo})
    async with Fetcher(config) as fetcher:
        result = await fetcher.fetch(f"{base}/", max_retries=1)

    assert result.ok
    assert result.status == 200
    assert "<title>Hi</title>" in result.text
    headers = seen["headers"]
    assert headers["User-Agent"] == config.user_agent
    assert headers["Accept-Language"] == "en-US,en;q=0.9"
    assert "Sec-Fetch-Mode" in headers


@pytest.mark.asyncio()
async def test_http_error_status_is_returned_without_retry(serve, config):
    calls = {"n": 0}

    async def missing(_):
        calls["n"] += 1
        return web.Response(status=404, text="gone")

    base = await serve({"/missing": missing})
    async with Fetcher(config) as fetcher:
        result = await fetcher.fetch(f"{base}/missing", max_retries=3)

    assert not result.ok
    assert result.status == 404
    assert result.reason == "Not Found"
    assert calls["n"] == 1


@pytest.mark.asyncio()
async def test_redirects_are_followed(serve, config):
    async def moved(_):
        raise web.HTTPFound("/target")

    base = await serve({"/old": moved, "/target": "<p>target</p>"})
    async with Fetcher(config) as fetcher:
        result = await fetcher.fetch(f"{base}/old", max_retries=1)

    assert result.status == 200
    assert result.url == f"{base}/target"


@pytest.mark.asyncio()
async def test_timeout_is_retried_then_succeeds(serve):
    calls = {"n": 0}

    async def slow_once(_):
        calls["n"] += 1
        if calls["n"] == 1:
            await asyncio.sleep(1.0)
        return web.Response(text="<p>ok</p>", content_type="text/html")

    base = await serve({"/": slow_once})
    config = CrawlerConfig(timeout=0.2, backoff_factor=0.0)
    async with Fetcher(config) as fetcher:
        result = await fetcher.fetch(f"{base}/", max_retries=2)

    assert result.ok
    assert calls["n"] == 2


@pytest.mark.asyncio()
async def test_timeout_exhausted_raises_fetch_timeout(serve):
    async def hang(_):
        await asyncio.sleep(1.0)
        return web.Response(text="late")

    base = await serve({"/": hang})
    config = CrawlerConfig(timeout=0.2, backoff_factor=0.0)
    async with Fetcher(config) as fetcher:
        with pytest.raises(FetchTimeoutError) as exc_info:
            await fetcher.fetch(f"{base}/", max_retries=2)

    assert isinstance(exc_info.value, TimeoutError)
    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio()
async def test_connection_refused_propagates_underlying_error(config, unused_tcp_port):
    async with Fetcher(config) as fetcher:
        with pytest.raises(aiohttp.ClientConnectorError):
            await fetcher.fetch(f"http://127.0.0.1:{unused_tcp_port}/", max_retries=2)


@pytest.mark.asyncio()
async def test_blocking_host_gets_blocked_site_error(config, failing_session):
    fetcher = Fetcher(config, session=failing_session)
    with pytest.raises(BlockedSiteError) as exc_info:
        await fetcher.fetch("https://twitter.com/x", max_retries=3)

    assert "twitter.com" in str(exc_info.value)
    assert exc_info.value.hostname == "twitter.com"
    assert exc_info.value.__cause__ is failing_session.errors[-1]
    assert len(failing_session.calls) == 3


@pytest.mark.asyncio()
async def test_other_host_gets_last_error_unchanged(config, failing_session):
    fetcher = Fetcher(config, session=failing_session)
    with pytest.raises(aiohttp.ClientConnectionError) as exc_info:
        await fetcher.fetch("https://example.org/x", max_retries=3)

    assert exc_info.value is failing_session.errors[-1]


@pytest.mark.asyncio()
async def test_exponential_backoff_between_attempts(monkeypatch, failing_session):
    delays = []

    async def fake_pause(delay, stop_event=None):
        delays.append(delay)
        return False

    monkeypatch.setattr(fetcher_module, "pause", fake_pause)
    fetcher = Fetcher(CrawlerConfig(backoff_factor=1.0), session=failing_session)
    with pytest.raises(aiohttp.ClientConnectionError):
        await fetcher.fetch("https://example.org/", max_retries=4)

    assert delays == [2.0, 4.0, 8.0]


@pytest.mark.asyncio()
async def test_stop_event_checked_before_attempt(config, failing_session):
    stop = asyncio.Event()
    stop.set()
    fetcher = Fetcher(config, session=failing_session, stop_event=stop)
    with pytest.raises(CrawlCancelledError):
        await fetcher.fetch("https://example.org/", max_retries=3)
    assert failing_session.calls == []


@pytest.mark.asyncio()
async def test_invalid_retry_count(config, failing_session):
    with pytest.raises(ValueError):
        await Fetcher(config, session=failing_session).fetch("https://example.org/", max_retries=0)


@pytest.mark.asyncio()
async def test_fetch_without_session_fails(config):
    with pytest.raises(RuntimeError):
        await Fetcher(config).fetch("https://example.org/", max_retries=1)


@pytest.mark.asyncio()
async def test_external_session_left_open(config):
    async with aiohttp.ClientSession() as session:
        async with Fetcher(config, session=session) as fetcher:
            assert fetcher.session is session
        assert not session.closed


@pytest.mark.asyncio()
async def test_external_session_sends_browser_headers(serve, config):
    seen = {}

    async def echo(request: web.Request) -> web.Response:
        seen["headers"] = request.headers.copy()
        return web.Response(text="<p>ok</p>", content_type="text/html")

    base = await serve({"/": echo})
    async with aiohttp.ClientSession() as session:
        await Fetcher(config, session=session).fetch(f"{base}/", max_retries=1)

    headers = seen["headers"]
    assert headers["User-Agent"] == config.user_agent
    assert headers["Accept-Language"] == "en-US,en;q=0.9"
    assert headers["Sec-Fetch-Dest"] == "document"
