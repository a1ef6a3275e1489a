"""Exception hierarchy for crawl jobs.

Every error a job can surface derives from :class:`KeycrawlError`.  The API
layer maps each class onto an HTTP status; see ``keycrawl.api.routers.crawl``.
"""

from __future__ import annotations


class KeycrawlError(Exception):
    """Base class for all keycrawl errors."""


class InvalidInputError(KeycrawlError):
    """The seed URL is missing or cannot be parsed.  No job is created."""


class PageFetchError(KeycrawlError):
    """A single page could not be navigated or extracted.

    Recorded on that page's ``PageResult``; never aborts the crawl.
    """

    max_message_length = 100

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"{url}: {message}")

    @property
    def short_message(self) -> str:
        """Message truncated for storage on a ``PageResult``."""
        return f"Scrape failed: {self.message[: self.max_message_length]}..."


class ResourceError(KeycrawlError):
    """The rendering session (browser or HTTP client) could not be acquired."""


class EmptyCrawlError(KeycrawlError):
    """The seed page could not be scraped, so the crawl produced nothing."""


class CrawlCancelled(KeycrawlError):
    """The crawl was cancelled before it finished."""


class EnrichmentError(KeycrawlError):
    """The analysis backend failed or returned data of the wrong shape.

    Always recovered locally by the fallback taxonomy.
    """


class PersistenceError(KeycrawlError):
    """A report write failed."""


class ReportNotFoundError(ValueError):
    """No report exists with the given id."""


class InvalidTransitionError(ValueError):
    """A report status change that the lifecycle does not allow."""
