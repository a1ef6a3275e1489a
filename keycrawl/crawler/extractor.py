"""Content extraction: turns rendered HTML into a :class:`FetchedPage`."""

from __future__ import annotations

import re
from typing import List
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from keycrawl.crawler.models import CrawlConfig, FetchedPage

# Text-bearing elements sampled for page content, in document order.
CONTENT_SELECTOR = "h1, h2, h3, p, li, span"

_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract_title(soup: BeautifulSoup) -> str:
    """Return the text of the first ``<title>`` tag, or empty string."""
    if soup.title and soup.title.string:
        return soup.title.string.strip()
    return ""


def _extract_snippets(soup: BeautifulSoup, config: CrawlConfig) -> List[str]:
    """Return trimmed text blocks whose length lies in the configured window."""
    snippets: List[str] = []
    for el in soup.select(CONTENT_SELECTOR):
        text = _WHITESPACE.sub(" ", el.get_text(" ", strip=True)).strip()
        if config.min_snippet_length <= len(text) < config.max_snippet_length:
            snippets.append(text)
            if len(snippets) >= config.max_snippets:
                break
    return snippets


def _extract_links(soup: BeautifulSoup, page_url: str, hostname: str) -> List[str]:
    """Return a deduplicated list of same-host http(s) links.

    Hrefs are resolved against *page_url* and their fragment is dropped.
    Bare same-page fragments (``#``, ``#section``) are excluded.
    """
    seen: set[str] = set()
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith("#"):
            continue
        try:
            resolved, _ = urldefrag(urljoin(page_url, href))
            parsed = urlparse(resolved)
        except ValueError:
            continue
        if parsed.scheme not in ("http", "https"):
            continue
        if parsed.hostname != hostname:
            continue
        if resolved not in seen:
            seen.add(resolved)
            links.append(resolved)
    return links


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_page(
    html: str,
    url: str,
    hostname: str,
    config: CrawlConfig,
) -> FetchedPage:
    """Extract title, content snippets and same-site links from *html*.

    Args:
        html: The rendered document.
        url: The page URL, used to resolve relative links.
        hostname: The crawl origin's hostname; links to other hosts are
            dropped.
        config: Snippet length window and count limits.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    return FetchedPage(
        url=url,
        title=_extract_title(soup),
        content=_extract_snippets(soup, config),
        links=_extract_links(soup, url, hostname),
    )
