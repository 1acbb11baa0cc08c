"""site_digest.parser.content: readable main-text extraction from parsed HTML."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_digest.config import CrawlerConfig
from site_digest.crawler.models import UNTITLED

__all__: Sequence[str] = ("ContentExtractor", "NOISE_SELECTORS", "CONTENT_SELECTORS")

NOISE_SELECTORS: Sequence[str] = (
    "script",
    "style",
    "noscript",
    "nav",
    "header",
    "footer",
    "aside",
    ".sidebar",
    ".menu",
    ".navigation",
    ".nav",
    ".header",
    ".footer",
    ".ads",
    ".advertisement",
    ".social",
    ".share",
    ".comments",
    ".comment",
)

# Tried in order; the first one with enough text wins.
CONTENT_SELECTORS: Sequence[str] = (
    "main",
    "article",
    ".main-content",
    ".content",
    ".post-content",
    ".entry-content",
    ".page-content",
    "#content",
    "#main",
    ".container .row",
    ".container",
    "body",
)

_WHITESPACE_RE = re.compile(r"\s+")
_BOILERPLATE_RE = re.compile(
    r"\b(?:skip to main content|skip to content|menu|search)\b", re.IGNORECASE
)
_SENTENCE_END_RE = re.compile(r"[.!?]+")


class ContentExtractor:
    """Turns a parsed document into title, cleaned text, summary and word count."""

    def __init__(self, config: Optional[CrawlerConfig] = None) -> None:
        self.config = config or CrawlerConfig()

    # ------------------------------------------------------------------ title
    def extract_title(self, doc: BeautifulSoup) -> str:
        """First non-empty of <title>, first <h1>, og:title, meta title."""
        title = (
            self._tag_text(doc.find("title"))
            or self._tag_text(doc.find("h1"))
            or self._meta_content(doc, property="og:title")
            or self._meta_content(doc, name="title")
            or UNTITLED
        )
        return title[: self.config.max_title_length]

    @staticmethod
    def _tag_text(tag: object) -> str:
        if not isinstance(tag, Tag):
            return ""
        return tag.get_text().strip()

    @staticmethod
    def _meta_content(doc: BeautifulSoup, **attrs: str) -> str:
        meta = doc.find("meta", attrs=attrs)
        if not isinstance(meta, Tag):
            return ""
        content = meta.get("content")
        return content.strip() if isinstance(content, str) else ""

    # ---------------------------------------------------------------- content
    def extract_content(self, doc: BeautifulSoup) -> str:
        """Return the cleaned main-body text of *doc*.

        Noise elements are removed from *doc* in place, so extract the title
        before calling this.
        """
        self._strip_noise(doc)

        content = ""
        for selector in CONTENT_SELECTORS:
            elements = doc.select(selector)
            if not elements:
                continue
            # length is taken before boilerplate and whitespace are stripped
            content = self._joined_text(elements).strip()
            if len(content) > self.config.min_content_length:
                break
        else:
            root = doc.body if isinstance(doc.body, Tag) else doc
            content = root.get_text()

        return self.normalize(content)[: self.config.max_content_length]

    @staticmethod
    def _strip_noise(doc: BeautifulSoup) -> None:
        for element in doc.select(", ".join(NOISE_SELECTORS)):
            # children of an already removed element are decomposed with it
            if not element.decomposed:
                element.decompose()

    @staticmethod
    def _joined_text(elements: List[Tag]) -> str:
        outermost: List[Tag] = []
        seen: set[int] = set()
        for element in elements:
            if any(id(parent) in seen for parent in element.parents):
                continue
            seen.add(id(element))
            outermost.append(element)
        return " ".join(element.get_text() for element in outermost)

    @staticmethod
    def normalize(text: str) -> str:
        """Collapse whitespace and drop navigation boilerplate phrases."""
        text = _WHITESPACE_RE.sub(" ", text).strip()
        text = _BOILERPLATE_RE.sub("", text)
        return _WHITESPACE_RE.sub(" ", text).strip()

    # ---------------------------------------------------------------- derived
    def summarize(self, text: str) -> str:
        cfg = self.config
        fragments = [f.strip() for f in _SENTENCE_END_RE.split(text)]
        sentences = [f for f in fragments if len(f) > cfg.min_sentence_length]
        summary = ". ".join(sentences[: cfg.summary_sentences]).strip()
        if len(summary) > cfg.max_summary_length:
            return summary[: cfg.max_summary_length] + "..."
        return summary + "."

    @staticmethod
    def word_count(text: str) -> int:
        return len(text.split())
