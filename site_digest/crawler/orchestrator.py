"""
Crawl run orchestration: discovery, then page-by-page crawling with progress events.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from site_digest.config import CrawlerConfig
from site_digest.crawler.discovery import UrlDiscoverer
from site_digest.crawler.models import PageRecord, PageStatus
from site_digest.crawler.page_crawler import PageCrawler
from site_digest.errors import CrawlCancelledError, DiscoveryError
from site_digest.events import (
    CompleteEvent,
    ErrorEvent,
    EventSink,
    PageEvent,
    ProgressEvent,
    ProgressSnapshot,
)
from site_digest.logger import logger
from site_digest.utils import pause

__all__ = ("RunState", "CrawlResult", "CrawlOrchestrator")


class RunState(str, Enum):
    DISCOVERING = "discovering"
    CRAWLING = "crawling"
    COMPLETED = "completed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class CrawlResult:
    """Outcome of one run as seen by the host."""

    seed_url: str
    state: RunState
    pages: List[PageRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def completed(self) -> int:
        return len(self.pages)

    @property
    def failed(self) -> int:
        return sum(1 for p in self.pages if p.status is PageStatus.ERROR)


class CrawlOrchestrator:
    """Runs discovery and then crawls every discovered URL in order.

    Events reach the sink in this order: one initial progress event, a
    progress/page pair per URL, then either a complete or an error event.
    Setting *stop_event* ends the run between fetch attempts without further
    events.
    """

    def __init__(
        self,
        discoverer: UrlDiscoverer,
        page_crawler: PageCrawler,
        config: Optional[CrawlerConfig] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.discoverer = discoverer
        self.page_crawler = page_crawler
        self.config = config or discoverer.config
        self.stop_event = stop_event
        self.state: Optional[RunState] = None
        self.progress: Optional[ProgressSnapshot] = None

    async def run(self, seed_url: str, sink: EventSink) -> CrawlResult:
        result = CrawlResult(seed_url=seed_url, state=RunState.DISCOVERING)
        self.state = RunState.DISCOVERING
        self.progress = None
        start = time.monotonic()
        logger.info("Starting crawl for: %s", seed_url)
        try:
            urls = await self.discoverer.discover(seed_url)
            total = len(urls)
            self._report_progress(sink, total, 0, seed_url)
            self.state = RunState.CRAWLING

            for index, url in enumerate(urls):
                if index and await pause(self.config.page_delay, self.stop_event):
                    raise CrawlCancelledError("Crawl stopped between pages")
                logger.info("Crawling %d/%d: %s", result.completed + 1, total, url)
                self._report_progress(sink, total, result.completed, url)
                page = await self.page_crawler.crawl_one(url)
                result.pages.append(page)
                self.progress = ProgressSnapshot(total, result.completed, url)
                sink(PageEvent(page))

            self._finish(result, RunState.COMPLETED)
            sink(CompleteEvent(result.completed))
            logger.info(
                "Crawl finished: %d pages (%d failed) in %.2f s",
                result.completed,
                result.failed,
                time.monotonic() - start,
            )
        except CrawlCancelledError as exc:
            self._finish(result, RunState.CANCELLED)
            logger.info("%s after %d pages", exc, result.completed)
        except DiscoveryError as exc:
            self._abort(result, sink, str(exc))
        except Exception as exc:
            logger.exception("Crawling failed for %s", seed_url)
            self._abort(result, sink, str(exc) or type(exc).__name__)
        return result

    def _report_progress(self, sink: EventSink, total: int, completed: int, current: str) -> None:
        self.progress = ProgressSnapshot(total=total, completed=completed, current=current)
        sink(ProgressEvent(self.progress))

    def _finish(self, result: CrawlResult, state: RunState) -> None:
        self.state = state
        result.state = state

    def _abort(self, result: CrawlResult, sink: EventSink, message: str) -> None:
        logger.error("Crawl aborted: %s", message)
        self._finish(result, RunState.ABORTED)
        result.error = message
        sink(ErrorEvent(message))
