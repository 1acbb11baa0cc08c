# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import List, Union

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web

from site_digest.config import CrawlerConfig
from site_digest.events import CrawlEvent

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
Route = Union[str, Handler]


@pytest.fixture()
def config() -> CrawlerConfig:
    """
    Fast config for tests: short timeout, no backoff, no politeness delay.
    """
    return CrawlerConfig(timeout=1.0, backoff_factor=0.0, page_delay=0.0)


def html_response(body: str) -> Handler:
    async def handler(_: web.Request) -> web.Response:
        return web.Response(text=body, content_type="text/html")

    return handler


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[Callable[[Mapping[str, Route]], Awaitable[str]]]:
    """
    Start a local site from a ``{path: html-or-handler}`` mapping and return
    its base URL (no trailing slash). Servers are cleaned up after the test.
    """
    runners: List[web.AppRunner] = []

    async def _start(routes: Mapping[str, Route]) -> str:
        app = web.Application()
        for path, route in routes.items():
            app.router.add_get(path, html_response(route) if isinstance(route, str) else route)
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    yield _start

    for runner in runners:
        await runner.cleanup()


class _RaisingRequest:
    def __init__(self, error: BaseException) -> None:
        self.error = error

    async def __aenter__(self):
        raise self.error

    async def __aexit__(self, *exc_info) -> bool:
        return False


class FailingSession:
    """Stands in for ClientSession where every request fails to connect."""

    closed = False

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.errors: List[aiohttp.ClientConnectionError] = []

    def get(self, url: str, **kwargs) -> _RaisingRequest:
        self.calls.append(url)
        error = aiohttp.ClientConnectionError(f"Cannot connect to host for {url}")
        self.errors.append(error)
        return _RaisingRequest(error)


@pytest.fixture()
def failing_session() -> FailingSession:
    return FailingSession()


@pytest.fixture()
def events() -> List[CrawlEvent]:
    """List usable as an event sink via ``events.append``."""
    return []
