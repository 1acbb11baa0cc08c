"""site_digest.utils: URL helpers and the cancellable pause shared by crawler components."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional, Sequence
from urllib.parse import urlparse

from site_digest.logger import logger

__all__: Sequence[str] = (
    "normalize_seed_url",
    "is_valid_url",
    "extract_hostname",
    "matching_domain",
    "pause",
)


def normalize_seed_url(url: str) -> str:
    """Prepend ``https://`` when the scheme is missing and validate the result.

    Raises ValueError for anything that is not an absolute http(s) URL.
    """
    raw = url.strip()
    if not raw:
        raise ValueError("URL is required")
    candidate = raw if "://" in raw else f"https://{raw}"
    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
    except ValueError as exc:
        raise ValueError(f"Invalid URL format: {url}") from exc
    if parsed.scheme.lower() not in ("http", "https") or not host:
        raise ValueError(f"Invalid URL format: {url}")
    normalized = candidate if parsed.path else parsed._replace(path="/").geturl()
    logger.debug("Normalized seed URL: %s -> %s", url, normalized)
    return normalized


def is_valid_url(url: str) -> bool:
    """Check that *url* is an absolute http(s) URL with a hostname."""
    try:
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.hostname)
    except ValueError:
        return False


def extract_hostname(url: str) -> str:
    """Lower-cased hostname of *url*, empty string when there is none."""
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def matching_domain(hostname: str, domains: Iterable[str]) -> Optional[str]:
    """Return the first entry of *domains* contained in *hostname*."""
    host = hostname.lower()
    for domain in domains:
        if domain and domain in host:
            return domain
    return None


async def pause(delay: float, stop_event: Optional[asyncio.Event] = None) -> bool:
    """Sleep for *delay* seconds or until *stop_event* is set.

    Returns True when the pause ended because a stop was requested.
    """
    if stop_event is None:
        if delay > 0:
            await asyncio.sleep(delay)
        return False
    if stop_event.is_set():
        return True
    if delay > 0:
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
    return stop_event.is_set()
