"""Tests for HTML content and link extraction."""

from __future__ import annotations

from bs4 import BeautifulSoup

from keycrawl.crawler.extractor import (
    _extract_links,
    _extract_snippets,
    _extract_title,
    extract_page,
)
from keycrawl.crawler.models import CrawlConfig, FetchedPage

_CONFIG = CrawlConfig()

_SIMPLE_HTML = """\
<!DOCTYPE html>
<html>
<head><title> Test Page </title></head>
<body>
  <h1>Solar energy for everyone today</h1>
  <p>This is the main content of the test page with enough text for extraction.</p>
  <p>Too short.</p>
  <ul><li>Battery storage   systems explained
      in detail</li></ul>
  <script>var ignored = "this script text should never be extracted";</script>
  <a href="/about">About</a>
  <a href="https://example.com/contact#form">Contact</a>
  <a href="https://example.com/contact">Contact again</a>
  <a href="#top">Top</a>
  <a href="https://other.com/page">Elsewhere</a>
  <a href="mailto:hi@example.com">Mail</a>
  <a href="javascript:void(0)">JS</a>
  <a href="http://example.com/plain">Plain http</a>
</body>
</html>
"""


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class TestExtractTitle:
    def test_extracts_and_trims_title(self) -> None:
        assert _extract_title(_soup(_SIMPLE_HTML)) == "Test Page"

    def test_missing_title_returns_empty(self) -> None:
        assert _extract_title(_soup("<html><body></body></html>")) == ""


class TestExtractSnippets:
    def test_keeps_snippets_in_length_window(self) -> None:
        snippets = _extract_snippets(_soup(_SIMPLE_HTML), _CONFIG)
        assert "Solar energy for everyone today" in snippets
        assert "Too short." not in snippets

    def test_collapses_internal_whitespace(self) -> None:
        snippets = _extract_snippets(_soup(_SIMPLE_HTML), _CONFIG)
        assert "Battery storage systems explained in detail" in snippets

    def test_rejects_snippets_of_max_length_or_more(self) -> None:
        html = f"<p>{'a' * 800}</p><p>{'b' * 799}</p>"
        snippets = _extract_snippets(_soup(html), _CONFIG)
        assert snippets == ["b" * 799]

    def test_minimum_length_is_inclusive(self) -> None:
        html = f"<p>{'c' * 15}</p><p>{'d' * 14}</p>"
        assert _extract_snippets(_soup(html), _CONFIG) == ["c" * 15]

    def test_caps_snippet_count(self) -> None:
        html = "".join(f"<p>Paragraph number {i} with words</p>" for i in range(40))
        assert len(_extract_snippets(_soup(html), _CONFIG)) == 25


class TestExtractLinks:
    def test_resolves_relative_links(self) -> None:
        links = _extract_links(_soup(_SIMPLE_HTML), "https://example.com/", "example.com")
        assert "https://example.com/about" in links

    def test_only_same_host(self) -> None:
        links = _extract_links(_soup(_SIMPLE_HTML), "https://example.com/", "example.com")
        assert all("other.com" not in link for link in links)

    def test_excludes_fragments_and_non_http(self) -> None:
        links = _extract_links(_soup(_SIMPLE_HTML), "https://example.com/", "example.com")
        assert not any("#" in link for link in links)
        assert not any(link.startswith(("mailto:", "javascript:")) for link in links)

    def test_dedupes_after_dropping_fragment(self) -> None:
        links = _extract_links(_soup(_SIMPLE_HTML), "https://example.com/", "example.com")
        assert links.count("https://example.com/contact") == 1

    def test_keeps_document_order_and_http_scheme(self) -> None:
        links = _extract_links(_soup(_SIMPLE_HTML), "https://example.com/", "example.com")
        assert links == [
            "https://example.com/about",
            "https://example.com/contact",
            "http://example.com/plain",
        ]

    def test_no_links_returns_empty(self) -> None:
        assert _extract_links(_soup("<p>none</p>"), "https://a.com/", "a.com") == []


class TestExtractPage:
    def test_returns_fetched_page(self) -> None:
        page = extract_page(_SIMPLE_HTML, "https://example.com/", "example.com", _CONFIG)
        assert isinstance(page, FetchedPage)
        assert page.url == "https://example.com/"
        assert page.title == "Test Page"
        assert page.content
        assert page.links

    def test_script_text_is_not_content(self) -> None:
        page = extract_page(_SIMPLE_HTML, "https://example.com/", "example.com", _CONFIG)
        assert not any("script text" in s for s in page.content)

    def test_empty_html_does_not_raise(self) -> None:
        page = extract_page("<html></html>", "https://example.com/", "example.com", _CONFIG)
        assert page.content == []
        assert page.links == []
