"""Exception hierarchy shared by the SiteDigest crawler components."""
from __future__ import annotations

__all__ = (
    "SiteDigestError",
    "DiscoveryError",
    "BlockedDomainError",
    "NoUrlsDiscoveredError",
    "FetchError",
    "FetchTimeoutError",
    "BlockedSiteError",
    "HttpStatusError",
    "ParseError",
    "CrawlCancelledError",
)

_ALTERNATIVES = "example.com, wikipedia.org, or your own website"


class SiteDigestError(Exception):
    """Base class for every error raised by the crawler."""


class DiscoveryError(SiteDigestError):
    """URL discovery could not produce a crawl list; aborts the run."""


class BlockedDomainError(DiscoveryError):
    """The seed hostname is on the deny-list of domains that block crawlers."""

    def __init__(self, hostname: str) -> None:
        self.hostname = hostname
        self.suggestion = f"Please try a different website like {_ALTERNATIVES}."
        super().__init__(
            f"The domain {hostname} typically blocks automated crawling. {self.suggestion}"
        )


class NoUrlsDiscoveredError(DiscoveryError):
    def __init__(self, seed_url: str) -> None:
        self.seed_url = seed_url
        super().__init__("No URLs discovered. Please check if the website is accessible.")


class FetchError(SiteDigestError):
    """A page could not be retrieved."""


class FetchTimeoutError(FetchError, TimeoutError):
    def __init__(self, url: str, timeout: float) -> None:
        self.url = url
        self.timeout = timeout
        super().__init__(f"Request to {url} timed out after {timeout:g} seconds")


class BlockedSiteError(FetchError):
    """Every attempt failed against a host that is known to block bots."""

    def __init__(self, hostname: str) -> None:
        self.hostname = hostname
        self.hint = f"Try a different website like {_ALTERNATIVES}."
        super().__init__(f"This website ({hostname}) blocks automated crawling. {self.hint}")


class HttpStatusError(FetchError):
    def __init__(self, url: str, status: int, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(f"HTTP {status}: {reason}" if reason else f"HTTP {status}")


class ParseError(SiteDigestError):
    """The document could not be turned into a queryable tree."""


class CrawlCancelledError(SiteDigestError):
    """The host asked the run to stop."""
