"""site_digest.aggregator: run-level report built from page records."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, TypedDict

from site_digest.crawler.models import PageRecord, PageStatus


class PageInfo(TypedDict, total=False):
    """One crawled page as it appears in reports."""

    id: str
    url: str
    title: str
    status: str
    summary: str
    word_count: int
    crawled_at: Optional[str]
    error: Optional[str]
    content: str


@dataclass(slots=True)
class CrawlReport:
    """Summary of a crawl run: page list plus totals."""

    seed_url: str = ""
    pages: List[PageInfo] = field(default_factory=list)
    completed: int = 0
    failed: int = 0
    total_words: int = 0

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _page_info(record: PageRecord, include_content: bool) -> PageInfo:
    info: PageInfo = {
        "id": record.id,
        "url": record.url,
        "title": record.title,
        "status": record.status.value,
        "summary": record.summary,
        "word_count": record.word_count,
        "crawled_at": record.crawled_at,
        "error": record.error,
    }
    if include_content:
        info["content"] = record.content
    return info


def aggregate_pages(
    pages: Iterable[PageRecord], seed_url: str = "", *, include_content: bool = True
) -> CrawlReport:
    """Collect page records into a CrawlReport, keeping their order."""
    report = CrawlReport(seed_url=seed_url)
    for record in pages:
        report.pages.append(_page_info(record, include_content))
        if record.status is PageStatus.ERROR:
            report.failed += 1
        else:
            report.completed += 1
            report.total_words += record.word_count
    return report
