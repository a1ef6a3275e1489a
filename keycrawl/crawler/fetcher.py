"""Page fetchers: navigate to one URL and extract its content and links.

Two interchangeable implementations share the :class:`PageFetcher` contract:

``PlaywrightFetcher`` (default)
    Headless Chromium.  Navigation waits for ``domcontentloaded`` and the
    route handler aborts images, stylesheets, fonts and media.

``HttpFetcher``
    Plain ``httpx`` GET.  Useful where no browser is installed; pages that
    build their content with JavaScript come back mostly empty.

A fetcher is a context manager.  The rendering session is acquired on
``__enter__`` and released on ``__exit__``, so a ``with`` block guarantees
cleanup on every exit path.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import httpx

from keycrawl.crawler.extractor import extract_page
from keycrawl.crawler.models import CrawlConfig, FetchedPage
from keycrawl.errors import PageFetchError, ResourceError

logger = logging.getLogger(__name__)

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font", "media"})

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def _first_line(exc: BaseException) -> str:
    """Playwright errors carry a multi-line call log; keep the headline."""
    text = str(exc).strip() or exc.__class__.__name__
    return text.splitlines()[0]


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class PageFetcher(ABC):
    """Fetch pages belonging to the site at *hostname*."""

    def __init__(self, hostname: str, config: CrawlConfig) -> None:
        self.hostname = hostname
        self.config = config

    @abstractmethod
    def open(self) -> None:
        """Acquire the session.  Raises :class:`ResourceError` on failure."""

    @abstractmethod
    def close(self) -> None:
        """Release the session.  Must be safe to call more than once."""

    @abstractmethod
    def fetch(self, url: str) -> FetchedPage:
        """Return the extracted page.  Raises :class:`PageFetchError`."""

    def __enter__(self) -> "PageFetcher":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


FetcherFactory = Callable[[str, CrawlConfig], PageFetcher]


# ---------------------------------------------------------------------------
# Playwright
# ---------------------------------------------------------------------------

def _block_non_essential(route: Any) -> None:
    """Route handler that aborts requests the extractor never needs."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


class PlaywrightFetcher(PageFetcher):
    """Render pages in one headless Chromium session."""

    def __init__(
        self,
        hostname: str,
        config: CrawlConfig,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        super().__init__(hostname, config)
        self.user_agent = user_agent
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    def open(self) -> None:
        try:
            # Lazy import: the http backend runs without a browser install.
            from playwright.sync_api import sync_playwright  # noqa: PLC0415

            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=True)
            context = self._browser.new_context(user_agent=self.user_agent)
            context.route("**/*", _block_non_essential)
            self._page = context.new_page()
        except Exception as exc:
            self.close()
            raise ResourceError(f"Could not start browser: {_first_line(exc)}") from exc
        logger.debug("Browser session started for %s", self.hostname)

    def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._page = self._browser = self._playwright = None
        try:
            if browser is not None:
                browser.close()
        finally:
            if playwright is not None:
                playwright.stop()

    def fetch(self, url: str) -> FetchedPage:
        if self._page is None:
            raise ResourceError("PlaywrightFetcher used outside of its session")
        try:
            self._page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=int(self.config.navigation_timeout * 1000),
            )
            html = self._page.content()
            return extract_page(html, url, self.hostname, self.config)
        except Exception as exc:  # noqa: BLE001
            raise PageFetchError(url, _first_line(exc)) from exc


# ---------------------------------------------------------------------------
# httpx
# ---------------------------------------------------------------------------

class HttpFetcher(PageFetcher):
    """Fetch raw HTML over HTTP without running scripts."""

    def __init__(
        self,
        hostname: str,
        config: CrawlConfig,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        super().__init__(hostname, config)
        self.user_agent = user_agent
        self._client: Optional[httpx.Client] = None

    def open(self) -> None:
        try:
            self._client = httpx.Client(
                headers={"User-Agent": self.user_agent},
                timeout=self.config.navigation_timeout,
                follow_redirects=True,
            )
        except Exception as exc:
            raise ResourceError(f"Could not create HTTP client: {exc}") from exc

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def fetch(self, url: str) -> FetchedPage:
        if self._client is None:
            raise ResourceError("HttpFetcher used outside of its session")
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise PageFetchError(url, _first_line(exc)) from exc

        content_type = response.headers.get("content-type", "")
        if content_type and "html" not in content_type.lower():
            raise PageFetchError(url, f"Unsupported content type {content_type!r}")

        try:
            return extract_page(response.text, url, self.hostname, self.config)
        except Exception as exc:  # noqa: BLE001
            raise PageFetchError(url, _first_line(exc)) from exc


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_BACKENDS: dict[str, type[PageFetcher]] = {
    "playwright": PlaywrightFetcher,
    "http": HttpFetcher,
}


def fetcher_factory(backend: str, user_agent: str = DEFAULT_USER_AGENT) -> FetcherFactory:
    """Return a callable building fetchers of the named *backend*.

    Raises:
        ValueError: If *backend* is not ``playwright`` or ``http``.
    """
    try:
        cls = _BACKENDS[backend]
    except KeyError:
        raise ValueError(
            f"Unknown fetcher backend {backend!r}. Use: {' | '.join(_BACKENDS)}"
        ) from None

    def _build(hostname: str, config: CrawlConfig) -> PageFetcher:
        return cls(hostname, config, user_agent=user_agent)  # type: ignore[call-arg]

    return _build
