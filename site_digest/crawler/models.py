"""
Data models for the SiteDigest crawler.
"""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

UNTITLED = "Untitled Page"
ERROR_TITLE = "Error"


class PageStatus(str, Enum):
    PENDING = "pending"
    CRAWLING = "crawling"
    COMPLETED = "completed"
    ERROR = "error"


def new_page_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class FetchResult:
    """Response of a single GET: final URL, status line and decoded body."""

    url: str
    status: int
    reason: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True, slots=True)
class PageRecord:
    """Structured outcome of crawling one URL.

    A record is either ``completed`` with content or ``error`` with a message
    and empty content; use :meth:`completed` and :meth:`failed` to build one.
    """

    id: str
    url: str
    title: str
    content: str
    status: PageStatus
    summary: str = ""
    word_count: int = 0
    crawled_at: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def completed(
        cls,
        page_id: str,
        url: str,
        *,
        title: str,
        content: str,
        summary: str,
        word_count: int,
    ) -> PageRecord:
        return cls(
            id=page_id,
            url=url,
            title=title or UNTITLED,
            content=content,
            status=PageStatus.COMPLETED,
            summary=summary,
            word_count=word_count,
            crawled_at=utc_now_iso(),
        )

    @classmethod
    def failed(cls, page_id: str, url: str, message: str) -> PageRecord:
        return cls(
            id=page_id,
            url=url,
            title=ERROR_TITLE,
            content="",
            status=PageStatus.ERROR,
            word_count=0,
            crawled_at=utc_now_iso(),
            error=message or "Unknown error",
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data
