"""
Crawling of a single URL into a stored page record.
"""
from __future__ import annotations

from typing import Optional

from site_digest.config import CrawlerConfig
from site_digest.crawler.fetcher import Fetcher
from site_digest.crawler.models import PageRecord, new_page_id
from site_digest.errors import CrawlCancelledError, HttpStatusError
from site_digest.logger import logger
from site_digest.parser.content import ContentExtractor
from site_digest.parser.html_parser import parse_html
from site_digest.storage import PageStore

__all__ = ("PageCrawler",)


class PageCrawler:
    """Fetch, extract and persist one page.

    :meth:`crawl_one` does not raise on failure: the problem is recorded in an
    ``error`` record instead. Only a stop request escapes.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        store: PageStore,
        extractor: Optional[ContentExtractor] = None,
        config: Optional[CrawlerConfig] = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.config = config or fetcher.config
        self.extractor = extractor or ContentExtractor(self.config)

    async def crawl_one(self, url: str) -> PageRecord:
        page_id = new_page_id()
        logger.info("Crawling single page: %s", url)
        try:
            record = await self._crawl(page_id, url)
        except CrawlCancelledError:
            raise
        except Exception as exc:
            logger.warning("Error crawling page %s: %r", url, exc)
            record = PageRecord.failed(page_id, url, str(exc) or type(exc).__name__)
        self.store.put(record.id, record)
        return record

    async def _crawl(self, page_id: str, url: str) -> PageRecord:
        result = await self.fetcher.fetch(url, self.config.page_retries)
        if not result.ok:
            raise HttpStatusError(url, result.status, result.reason)

        doc = parse_html(result.text, url)
        title = self.extractor.extract_title(doc)
        content = self.extractor.extract_content(doc)
        record = PageRecord.completed(
            page_id,
            url,
            title=title,
            content=content,
            summary=self.extractor.summarize(content),
            word_count=self.extractor.word_count(content),
        )
        logger.debug("Processed %s: %d words", url, record.word_count)
        return record
