"""
Fetcher module: HTTP GET with browser-like headers, timeout and retry/backoff.
"""
from __future__ import annotations

import asyncio
from types import TracebackType
from typing import Dict, Optional, Type

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_digest.config import CrawlerConfig
from site_digest.crawler.models import FetchResult
from site_digest.errors import BlockedSiteError, CrawlCancelledError, FetchTimeoutError
from site_digest.logger import logger
from site_digest.utils import extract_hostname, matching_domain, pause

# "br" is left out: aiohttp only decodes brotli when the optional extra is installed.
BROWSER_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
}


def browser_headers(user_agent: str) -> Dict[str, str]:
    return {"User-Agent": user_agent, **BROWSER_HEADERS}


class Fetcher:
    """Handles HTTP fetching with per-attempt timeout and bounded retries/backoff.

    Use as an async context manager to get a session of its own, or pass an
    existing :class:`aiohttp.ClientSession`, which is then left open. Browser
    headers go out with every request either way.
    """

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        session: Optional[ClientSession] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.config = config or CrawlerConfig()
        self.session = session
        self.stop_event = stop_event
        self._owns_session = False

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(raise_for_status=False)
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
        if self._owns_session:
            self.session = None
            self._owns_session = False

    async def fetch(self, url: str, max_retries: int) -> FetchResult:
        """
        GET *url*, making at most *max_retries* attempts.

        Any HTTP status is returned as a result. Timeouts and network errors
        are retried after ``backoff_factor * 2**attempt`` seconds. Once the
        attempts are exhausted the last error is raised unchanged, or
        BlockedSiteError for hosts known to block crawlers.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.session is None:
            raise RuntimeError("Session not initialized")

        timeout = ClientTimeout(total=self.config.timeout)
        headers = browser_headers(self.config.user_agent)
        last_error: BaseException = RuntimeError(f"Max retries exceeded for {url}")
        for attempt in range(1, max_retries + 1):
            self._check_stop(url)
            logger.debug("Fetch attempt %d/%d for %s", attempt, max_retries, url)
            try:
                async with self.session.get(url, headers=headers, timeout=timeout, allow_redirects=True) as resp:
                    text = await resp.text(errors="replace")
                    return FetchResult(
                        url=str(resp.url),
                        status=resp.status,
                        reason=resp.reason or "",
                        text=text,
                    )
            except asyncio.TimeoutError:
                last_error = FetchTimeoutError(url, self.config.timeout)
            except (ClientError, OSError) as exc:
                last_error = exc
            logger.warning("Fetch attempt %d/%d failed for %s: %r", attempt, max_retries, url, last_error)

            if attempt < max_retries:
                backoff = self.config.backoff_factor * 2**attempt
                logger.debug("Retrying %s in %.2f s", url, backoff)
                if await pause(backoff, self.stop_event):
                    self._check_stop(url)

        hostname = extract_hostname(url)
        if matching_domain(hostname, self.config.blocking_hosts):
            raise BlockedSiteError(hostname) from last_error
        raise last_error

    def _check_stop(self, url: str) -> None:
        if self.stop_event is not None and self.stop_event.is_set():
            raise CrawlCancelledError(f"Crawl stopped before fetching {url}")
