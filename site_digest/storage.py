"""site_digest.storage: key-value store for page records, keyed by page id."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any, Dict, List, Mapping, Optional, Protocol

from site_digest.crawler.models import PageRecord
from site_digest.logger import logger

__all__ = ("PageStore", "MemoryPageStore")

_FIELD_NAMES = frozenset(f.name for f in fields(PageRecord))


class PageStore(Protocol):
    """What the crawler needs from persistence. Last write wins per id."""

    def put(self, page_id: str, record: PageRecord) -> None: ...

    def get(self, page_id: str) -> Optional[PageRecord]: ...

    def delete(self, page_id: str) -> None: ...

    def update(self, page_id: str, partial: Mapping[str, Any]) -> None: ...


class MemoryPageStore:
    """Process-local store backed by a dict."""

    def __init__(self) -> None:
        self._pages: Dict[str, PageRecord] = {}

    def put(self, page_id: str, record: PageRecord) -> None:
        self._pages[page_id] = record
        logger.debug("Stored page %s (%s)", page_id, record.url)

    def get(self, page_id: str) -> Optional[PageRecord]:
        return self._pages.get(page_id)

    def delete(self, page_id: str) -> None:
        self._pages.pop(page_id, None)

    def update(self, page_id: str, partial: Mapping[str, Any]) -> None:
        """Merge *partial* into the stored record; unknown ids are ignored."""
        existing = self._pages.get(page_id)
        if existing is None:
            return
        unknown = set(partial) - _FIELD_NAMES
        if unknown:
            raise ValueError(f"Unknown page fields: {', '.join(sorted(unknown))}")
        if "id" in partial and partial["id"] != page_id:
            raise ValueError("Page id cannot be changed")
        self._pages[page_id] = replace(existing, **partial)

    def all(self) -> List[PageRecord]:
        return list(self._pages.values())

    def clear(self) -> None:
        self._pages.clear()

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._pages
