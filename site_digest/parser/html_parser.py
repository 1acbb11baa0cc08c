"""HTML parsing helper for SiteDigest.

Both URL discovery and page crawling need a queryable document tree built from
raw markup. :func:`parse_html` is the one place where that tree is produced,
so the parser backend and its failure mode stay consistent:

* the tree is a :class:`bs4.BeautifulSoup` using the stdlib ``html.parser``;
* anything the backend chokes on is reported as :class:`ParseError`.
"""
from __future__ import annotations

from collections.abc import Sequence

from bs4 import BeautifulSoup

from site_digest.errors import ParseError

__all__: Sequence[str] = ("parse_html",)

PARSER_BACKEND = "html.parser"


def parse_html(html: str | bytes, url: str = "") -> BeautifulSoup:
    """Parse *html* into a BeautifulSoup tree.

    Parameters
    ----------
    html
        Raw markup as received from the server.
    url
        Only used to make the error message useful.
    """
    if html is None:
        raise ParseError(f"No HTML to parse for {url or 'document'}")
    try:
        return BeautifulSoup(html, PARSER_BACKEND)
    except Exception as exc:  # html.parser raises assorted builtin errors on broken markup
        raise ParseError(f"Failed to parse HTML from {url or 'document'}: {exc}") from exc
