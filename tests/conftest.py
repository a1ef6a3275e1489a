"""Shared fixtures: an in-memory report DB and a scripted fake website.

``FakeSite`` stands in for the network.  It maps URLs to
:class:`FetchedPage` objects (or error messages) and hands out
:class:`FakeFetcher` sessions, recording every open/close and fetch so tests
can assert on traversal order and session cleanup.
"""

from __future__ import annotations

import sqlite3
from typing import Dict, Generator, Iterable, List, Optional, Union

import pytest

from keycrawl.crawler.fetcher import PageFetcher
from keycrawl.crawler.models import CrawlConfig, FetchedPage
from keycrawl.db.connection import get_connection
from keycrawl.db.migrations import init_db
from keycrawl.errors import PageFetchError, ResourceError

DEFAULT_TEXT = "Renewable energy storage solutions for modern households and businesses"


def make_page(
    url: str,
    links: Iterable[str] = (),
    content: Optional[List[str]] = None,
    title: str = "",
) -> FetchedPage:
    return FetchedPage(
        url=url,
        title=title or f"Title of {url}",
        content=list(content) if content is not None else [DEFAULT_TEXT],
        links=list(links),
    )


class FakeFetcher(PageFetcher):
    def __init__(self, site: "FakeSite", hostname: str, config: CrawlConfig) -> None:
        super().__init__(hostname, config)
        self.site = site

    def open(self) -> None:
        if self.site.fail_open:
            raise ResourceError("browser executable not found")
        self.site.opened += 1

    def close(self) -> None:
        self.site.closed += 1

    def fetch(self, url: str) -> FetchedPage:
        self.site.fetched.append(url)
        if self.site.cancel_after is not None and len(self.site.fetched) >= self.site.cancel_after:
            self.site.cancel_event.set()  # type: ignore[union-attr]
        entry = self.site.pages.get(url)
        if entry is None:
            raise PageFetchError(url, "net::ERR_NAME_NOT_RESOLVED")
        if isinstance(entry, str):
            raise PageFetchError(url, entry)
        return entry


class FakeSite:
    """A scripted set of pages served through :class:`FakeFetcher`."""

    def __init__(self, pages: Optional[Dict[str, Union[FetchedPage, str]]] = None) -> None:
        self.pages: Dict[str, Union[FetchedPage, str]] = dict(pages or {})
        self.fetched: List[str] = []
        self.opened = 0
        self.closed = 0
        self.fail_open = False
        self.cancel_after: Optional[int] = None
        self.cancel_event = None

    def add(self, url: str, links: Iterable[str] = (), **kwargs) -> "FakeSite":
        self.pages[url] = make_page(url, links, **kwargs)
        return self

    def fail(self, url: str, message: str = "Timeout 60000ms exceeded.") -> "FakeSite":
        self.pages[url] = message
        return self

    def factory(self, hostname: str, config: CrawlConfig) -> FakeFetcher:
        return FakeFetcher(self, hostname, config)


@pytest.fixture()
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """Fresh in-memory DB with the schema initialised."""
    connection = get_connection(db_path=":memory:")
    init_db(connection)
    yield connection
    connection.close()
