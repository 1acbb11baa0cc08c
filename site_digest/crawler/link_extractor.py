"""
Link extraction and href resolution utilities for SiteDigest.
"""
from __future__ import annotations

from typing import List, Sequence
from urllib.parse import ParseResult, urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

NON_HTML_EXTENSIONS: Sequence[str] = (
    ".pdf",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".zip",
    ".exe",
    ".doc",
    ".docx",
    ".xls",
    ".xlsx",
    ".ppt",
    ".pptx",
    ".mp4",
    ".mp3",
    ".avi",
    ".mov",
)


def resolve_href(href: str, seed: ParseResult, page_url: str) -> str:
    """
    Turn *href* into an absolute URL.

    Absolute ``http…`` links are kept as-is, protocol-relative links take the
    seed's scheme, root-relative links the seed's scheme and host; anything
    else is resolved against the page it was found on.
    """
    if href.startswith("http"):
        return href
    if href.startswith("//"):
        return f"{seed.scheme}:{href}"
    if href.startswith("/"):
        return f"{seed.scheme}://{seed.netloc}{href}"
    return urljoin(page_url, href)


def is_crawlable(url: str, seed_host: str) -> bool:
    """
    True for same-host http(s) URLs without a fragment that do not point to a
    known non-HTML file. mailto:, tel: and javascript: links never qualify.
    """
    if "#" in url:
        return False
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or host != seed_host:
        return False
    return not parsed.path.lower().endswith(tuple(NON_HTML_EXTENSIONS))


def extract_links(doc: BeautifulSoup, page_url: str, seed_url: str) -> List[str]:
    """
    Extract crawlable links from a parsed page, in document order, without
    duplicates.
    """
    seed = urlparse(seed_url)
    seed_host = seed.hostname or ""
    seen: set[str] = set()
    links: List[str] = []
    for tag in doc.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw:
            continue
        try:
            absolute = resolve_href(raw, seed, page_url)
        except ValueError:
            continue
        if absolute in seen or not is_crawlable(absolute, seed_host):
            continue
        seen.add(absolute)
        links.append(absolute)
    return links
