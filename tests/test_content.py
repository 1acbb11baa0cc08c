# File: tests/test_content.py
"""Content extraction: title fallbacks, main-text heuristics, summary and word count."""
from __future__ import annotations

import pytest

from site_digest.config import CrawlerConfig
from site_digest.parser.content import ContentExtractor
from site_digest.parser.html_parser import parse_html

LONG_PARAGRAPH = (
    "Renewable energy sources such as wind and solar power are becoming cheaper every year, "
    "and grid operators are learning to balance them with storage."
)


@pytest.fixture()
def extractor() -> ContentExtractor:
    return ContentExtractor(CrawlerConfig())


# --------------------------------------------------------------------------- #
#                                    Title                                    #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "html,expected",
    [
        ("<html><head><title> Page Title </title></head><body><h1>Heading</h1></body></html>", "Page Title"),
        ("<html><head><title>  </title></head><body><h1>Main <b>Heading</b></h1><h1>Second</h1></body></html>", "Main Heading"),
        ('<html><head><meta property="og:title" content="OG Title"></head><body></body></html>', "OG Title"),
        ('<html><head><meta name="title" content="Meta Title"></head><body></body></html>', "Meta Title"),
        ("<html><body><p>No title anywhere</p></body></html>", "Untitled Page"),
    ],
)
def test_title_resolution_order(extractor, html, expected):
    assert extractor.extract_title(parse_html(html)) == expected


def test_title_prefers_og_over_meta_title(extractor):
    html = (
        '<html><head><meta name="title" content="Meta Title">'
        '<meta property="og:title" content="OG Title"></head></html>'
    )
    assert extractor.extract_title(parse_html(html)) == "OG Title"


def test_title_truncated(extractor):
    html = f"<html><head><title>{'x' * 250}</title></head></html>"
    assert extractor.extract_title(parse_html(html)) == "x" * 200


# --------------------------------------------------------------------------- #
#                                   Content                                   #
# --------------------------------------------------------------------------- #


def test_short_body_falls_back_to_body_text(extractor):
    doc = parse_html("<html><body><main>Hello world. This works.</main></body></html>")
    assert extractor.extract_content(doc) == "Hello world. This works."


def test_main_preferred_and_noise_removed(extractor):
    html = f"""
    <html><body>
      <nav>Home About Contact</nav>
      <div class="sidebar">Popular posts</div>
      <main>
        <script>var tracking = 1;</script>
        <p>{LONG_PARAGRAPH}</p>
        <div class="share">Share on social</div>
      </main>
      <footer>Copyright</footer>
    </body></html>
    """
    content = extractor.extract_content(parse_html(html))
    assert content == LONG_PARAGRAPH


def test_first_selector_with_enough_text_wins(extractor):
    html = f"""
    <html><body>
      <article>Too short to count.</article>
      <div class="content"><p>{LONG_PARAGRAPH}</p></div>
      <div class="other">Unrelated text</div>
    </body></html>
    """
    assert extractor.extract_content(parse_html(html)) == LONG_PARAGRAPH


def test_nested_matches_are_not_duplicated(extractor):
    html = f"""
    <html><body>
      <div class="container"><div class="container"><p>{LONG_PARAGRAPH}</p></div></div>
    </body></html>
    """
    assert extractor.extract_content(parse_html(html)) == LONG_PARAGRAPH


def test_whitespace_and_boilerplate_normalized(extractor):
    html = (
        "<html><body><p>Skip to main content</p>\n<p>Menu</p>\n"
        "<p>Research\t\tnotes</p>\n\n\n<p>SEARCH</p> <p>on   solar</p></body></html>"
    )
    assert extractor.extract_content(parse_html(html)) == "Research notes on solar"


def test_inline_markup_does_not_split_words(extractor):
    doc = parse_html('<main><p>Read the <a href="/d">docs</a>, then <b>deploy</b>.</p></main>')
    content = extractor.extract_content(doc)

    assert content == "Read the docs, then deploy."
    assert extractor.word_count(content) == 5


def test_container_length_measured_before_normalization(extractor):
    html = f"""
    <html><body>
      <main>{'Menu ' * 30}Short note.</main>
      <p>{LONG_PARAGRAPH}</p>
    </body></html>
    """
    assert extractor.extract_content(parse_html(html)) == "Short note."


def test_document_without_body(extractor):
    assert extractor.extract_content(parse_html("<p>Just a fragment</p>")) == "Just a fragment"


def test_content_truncated():
    extractor = ContentExtractor(CrawlerConfig(max_content_length=50, max_summary_length=40))
    html = f"<html><body><main>{'word ' * 100}</main></body></html>"
    assert len(extractor.extract_content(parse_html(html))) == 50


# --------------------------------------------------------------------------- #
#                               Summary & count                               #
# --------------------------------------------------------------------------- #


def test_summary_uses_first_three_long_fragments(extractor):
    text = "Short. This is sentence two which is long enough. Another long enough sentence here. A fourth one."
    assert extractor.summarize(text) == (
        "This is sentence two which is long enough. Another long enough sentence here."
    )


def test_summary_limited_to_three_sentences(extractor):
    sentences = [f"Sentence number {i} has plenty of characters" for i in range(5)]
    summary = extractor.summarize(". ".join(sentences) + ".")
    assert summary == ". ".join(sentences[:3]) + "."


def test_summary_truncated_with_ellipsis(extractor):
    fragment = "word " * 30
    summary = extractor.summarize(". ".join([fragment] * 3) + ".")
    assert len(summary) == 303
    assert summary.endswith("...")


def test_summary_without_long_sentences(extractor):
    assert extractor.summarize("Hello world. This works.") == "."


@pytest.mark.parametrize(
    "text,count",
    [
        ("", 0),
        ("   ", 0),
        ("one", 1),
        ("  leading and trailing  ", 3),
        ("multiple    internal \t\n spaces here", 4),
        ("Hello world. This works.", 4),
    ],
)
def test_word_count(text, count):
    assert ContentExtractor.word_count(text) == count
