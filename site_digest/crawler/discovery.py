"""
Breadth-first discovery of same-host URLs starting from a seed.
"""
from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, List, Optional, Set

from aiohttp import ClientError

from site_digest.config import CrawlerConfig
from site_digest.crawler.fetcher import Fetcher
from site_digest.crawler.link_extractor import extract_links
from site_digest.errors import (
    BlockedDomainError,
    CrawlCancelledError,
    DiscoveryError,
    FetchError,
    NoUrlsDiscoveredError,
    ParseError,
)
from site_digest.logger import logger
from site_digest.parser.html_parser import parse_html
from site_digest.utils import extract_hostname, is_valid_url, matching_domain

__all__ = ("UrlDiscoverer",)


class UrlDiscoverer:
    """Builds the ordered list of URLs a crawl run will visit.

    Every dequeued URL counts as discovered before it is fetched, so a page
    that cannot be reached still takes a slot and later shows up as an error
    record.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        config: Optional[CrawlerConfig] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.fetcher = fetcher
        self.config = config or fetcher.config
        self.stop_event = stop_event

    async def discover(self, seed_url: str) -> List[str]:
        if not is_valid_url(seed_url):
            raise DiscoveryError(f"Invalid seed URL: {seed_url}")
        hostname = extract_hostname(seed_url)
        if matching_domain(hostname, self.config.blocked_domains):
            raise BlockedDomainError(hostname)

        logger.info("Starting URL discovery for domain: %s", hostname)
        visited: Set[str] = set()
        queued: Set[str] = {seed_url}
        frontier: Deque[str] = deque([seed_url])
        discovered: List[str] = []

        while frontier and len(discovered) < self.config.max_pages:
            if self.stop_event is not None and self.stop_event.is_set():
                raise CrawlCancelledError("Crawl stopped during discovery")
            url = frontier.popleft()
            queued.discard(url)
            if url in visited:
                continue
            visited.add(url)
            discovered.append(url)

            try:
                links = await self._links_from(url, seed_url)
            except (FetchError, ParseError, ClientError, OSError) as exc:
                logger.warning("Error discovering URLs from %s: %r", url, exc)
                continue

            accepted: List[str] = []
            for link in links:
                if link in visited or link in queued:
                    continue
                accepted.append(link)
                if len(accepted) >= self.config.max_links_per_page:
                    break
            frontier.extend(accepted)
            queued.update(accepted)
            logger.info("Found %d valid links on %s (%d queued)", len(links), url, len(accepted))

        if not discovered:
            raise NoUrlsDiscoveredError(seed_url)
        logger.info("Total discovered URLs: %d", len(discovered))
        return discovered

    async def _links_from(self, url: str, seed_url: str) -> List[str]:
        result = await self.fetcher.fetch(url, self.config.discovery_retries)
        if not result.ok:
            logger.info("Failed to fetch %s: HTTP %d", url, result.status)
            return []
        doc = parse_html(result.text, url)
        return extract_links(doc, url, seed_url)
