"""Data models for the crawl pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, List, Optional
from urllib.parse import urlparse

from keycrawl.crawler.stopwords import DEFAULT_STOPWORDS
from keycrawl.errors import InvalidInputError


@dataclass(frozen=True)
class CrawlConfig:
    """Immutable budgets and extraction limits for one crawl job."""

    max_depth: int = 3
    max_pages: int = 500
    navigation_timeout: float = 60.0
    max_snippets: int = 25
    stored_snippets: int = 15
    min_snippet_length: int = 15
    max_snippet_length: int = 800
    top_keywords: int = 10
    stopwords: frozenset[str] = DEFAULT_STOPWORDS


@dataclass(frozen=True)
class CrawlJob:
    """The seed of one crawl and the origin it is confined to."""

    seed_url: str
    origin: str
    hostname: str

    @classmethod
    def from_url(cls, url: Optional[str]) -> "CrawlJob":
        """Validate *url* and derive the crawl origin.

        Raises:
            InvalidInputError: If *url* is empty, not http(s), or has no host.
        """
        if not url or not url.strip():
            raise InvalidInputError("Starting URL is required")
        seed = url.strip()
        try:
            parsed = urlparse(seed)
            hostname = parsed.hostname
        except ValueError as exc:
            raise InvalidInputError(f"Invalid URL format: {exc}") from exc
        if parsed.scheme not in ("http", "https") or not hostname:
            raise InvalidInputError("Invalid URL format")
        if not parsed.path:
            # "https://a.test" and "https://a.test/" are the same page.
            seed = parsed._replace(path="/").geturl()
        return cls(
            seed_url=seed,
            origin=f"{parsed.scheme}://{parsed.netloc.lower()}",
            hostname=hostname,
        )

    @property
    def domain(self) -> str:
        return domain_of(self.hostname)


def domain_of(hostname_or_url: str) -> str:
    """Reduce a hostname or URL to the domain key reports are grouped by."""
    value = hostname_or_url.strip().lower()
    if "://" in value:
        value = urlparse(value).hostname or ""
    return value[4:] if value.startswith("www.") else value


@dataclass(frozen=True)
class FrontierEntry:
    url: str
    depth: int


@dataclass(frozen=True)
class KeywordCount:
    word: str
    count: int


@dataclass
class FetchedPage:
    """Title, text snippets and same-site links extracted from one page."""

    url: str
    title: str
    content: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PageResult:
    """The outcome of visiting one URL.  Failed visits carry ``error``."""

    url: str
    depth: int
    title: str = ""
    content: tuple[str, ...] = ()
    found_links: int = 0
    keywords: tuple[KeywordCount, ...] = ()
    content_length: int = 0
    word_count: int = 0
    timestamp: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """camelCase record, the same shape as the rest of a report payload."""
        return {
            "url": self.url,
            "depth": self.depth,
            "title": self.title,
            "content": list(self.content),
            "foundLinks": self.found_links,
            "keywords": [asdict(k) for k in self.keywords],
            "contentLength": self.content_length,
            "wordCount": self.word_count,
            "timestamp": self.timestamp,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageResult":
        return cls(
            url=data["url"],
            depth=data["depth"],
            title=data.get("title") or "",
            content=tuple(data.get("content") or ()),
            found_links=data.get("foundLinks", 0),
            keywords=tuple(
                KeywordCount(word=k["word"], count=k["count"])
                for k in data.get("keywords") or ()
            ),
            content_length=data.get("contentLength", 0),
            word_count=data.get("wordCount", 0),
            timestamp=data.get("timestamp", ""),
            error=data.get("error"),
        )


@dataclass
class CrawlOutcome:
    """Everything the orchestrator hands back when its loop exits."""

    results: List[PageResult]
    total_scraped: int
    pending: int = 0

    @property
    def succeeded(self) -> List[PageResult]:
        return [r for r in self.results if r.ok]
