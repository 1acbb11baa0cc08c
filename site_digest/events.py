"""site_digest.events: progress snapshot and the events a crawl run emits."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Union

from site_digest.crawler.models import PageRecord

__all__ = (
    "ProgressSnapshot",
    "ProgressEvent",
    "PageEvent",
    "CompleteEvent",
    "ErrorEvent",
    "CrawlEvent",
    "EventSink",
)


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """How far a run has come: URLs in total, pages done, URL in progress."""

    total: int
    completed: int
    current: str


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    progress: ProgressSnapshot
    type: str = "progress"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "progress": asdict(self.progress)}


@dataclass(frozen=True, slots=True)
class PageEvent:
    page: PageRecord
    type: str = "page"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "page": self.page.to_dict()}


@dataclass(frozen=True, slots=True)
class CompleteEvent:
    total_pages: int
    type: str = "complete"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "total_pages": self.total_pages}


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    message: str
    type: str = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "error": self.message}


CrawlEvent = Union[ProgressEvent, PageEvent, CompleteEvent, ErrorEvent]
EventSink = Callable[[CrawlEvent], None]
