"""site_digest.engine: wiring of fetcher, store and orchestrator for hosts such as the CLI."""

from __future__ import annotations

import asyncio
from typing import List, Optional

from site_digest.config import CrawlerConfig, load_config
from site_digest.crawler.discovery import UrlDiscoverer
from site_digest.crawler.fetcher import Fetcher
from site_digest.crawler.models import PageRecord
from site_digest.crawler.orchestrator import CrawlOrchestrator, CrawlResult
from site_digest.crawler.page_crawler import PageCrawler
from site_digest.events import CrawlEvent, EventSink
from site_digest.logger import logger
from site_digest.storage import MemoryPageStore, PageStore

__all__ = ["Engine", "start_crawl", "crawl_page", "build_orchestrator"]


def build_orchestrator(
    config: CrawlerConfig,
    fetcher: Fetcher,
    store: PageStore,
    stop_event: Optional[asyncio.Event] = None,
) -> CrawlOrchestrator:
    discoverer = UrlDiscoverer(fetcher, config, stop_event=stop_event)
    page_crawler = PageCrawler(fetcher, store, config=config)
    return CrawlOrchestrator(discoverer, page_crawler, config, stop_event=stop_event)


async def start_crawl(
    config: CrawlerConfig,
    seed_url: str,
    sink: EventSink,
    store: Optional[PageStore] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> CrawlResult:
    """Run a full crawl of *seed_url*, reporting every event to *sink*."""
    store = store if store is not None else MemoryPageStore()
    async with Fetcher(config, stop_event=stop_event) as fetcher:
        orchestrator = build_orchestrator(config, fetcher, store, stop_event)
        return await orchestrator.run(seed_url, sink)


async def crawl_page(
    config: CrawlerConfig,
    url: str,
    store: Optional[PageStore] = None,
) -> PageRecord:
    """Crawl a single URL outside of a run (ad-hoc re-crawl)."""
    store = store if store is not None else MemoryPageStore()
    async with Fetcher(config) as fetcher:
        return await PageCrawler(fetcher, store, config=config).crawl_one(url)


class Engine:
    """Facade for synchronous hosts and tests: one config, one page store."""

    @staticmethod
    def load_config(path: Optional[str]) -> CrawlerConfig:
        """Load config from YAML/JSON or fall back to defaults."""
        return load_config(path)

    def __init__(self, config: Optional[CrawlerConfig] = None, store: Optional[MemoryPageStore] = None) -> None:
        self.config = config or CrawlerConfig()
        self.store = store if store is not None else MemoryPageStore()

    def crawl(self, seed_url: str, sink: Optional[EventSink] = None) -> CrawlResult:
        """Run a crawl to the end and return its result; events go to *sink* if given."""
        events: List[CrawlEvent] = []
        result = asyncio.run(start_crawl(self.config, seed_url, sink or events.append, self.store))
        logger.info("Crawl of %s ended in state %s", seed_url, result.state.value)
        return result

    def recrawl(self, url: str) -> PageRecord:
        return asyncio.run(crawl_page(self.config, url, self.store))

    def get_page(self, page_id: str) -> Optional[PageRecord]:
        return self.store.get(page_id)

    def delete_page(self, page_id: str) -> None:
        self.store.delete(page_id)

    def pages(self) -> List[PageRecord]:
        return self.store.all()
