"""Breadth-first crawl loop.

``CrawlOrchestrator.crawl`` drives the :class:`Frontier` and a
:class:`PageFetcher` under the job's depth and page budgets:

    seed → dequeue → fetch → PageResult → enqueue same-site links → …

Pages are fetched one at a time through a single fetcher session which is
opened before the loop and closed on every exit path.  A page that fails to
load is recorded with its error and contributes no links; it never aborts the
crawl.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlparse

from keycrawl.crawler.fetcher import FetcherFactory, PageFetcher
from keycrawl.crawler.frontier import Frontier
from keycrawl.crawler.keywords import count_words, extract_keywords
from keycrawl.crawler.models import (
    CrawlConfig,
    CrawlJob,
    CrawlOutcome,
    FrontierEntry,
    PageResult,
)
from keycrawl.errors import CrawlCancelled, PageFetchError

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CrawlOrchestrator:
    """Run bounded breadth-first crawls with fetchers built by *fetcher_factory*."""

    def __init__(
        self,
        fetcher_factory: FetcherFactory,
        config: Optional[CrawlConfig] = None,
    ) -> None:
        self.fetcher_factory = fetcher_factory
        self.config = config or CrawlConfig()

    def crawl(
        self,
        seed_url: str,
        cancel: Optional[threading.Event] = None,
    ) -> CrawlOutcome:
        """Crawl the site at *seed_url* and return one result per visited URL.

        Args:
            seed_url: Starting page.  Its hostname bounds the crawl.
            cancel: When set, the loop stops before the next fetch.

        Raises:
            InvalidInputError: If *seed_url* is not a usable http(s) URL.
            ResourceError: If the fetcher session cannot be acquired.
            CrawlCancelled: If *cancel* was set before the frontier drained.
        """
        job = CrawlJob.from_url(seed_url)
        config = self.config
        frontier = Frontier(config.max_depth)
        frontier.enqueue(job.seed_url, 0)
        results: List[PageResult] = []

        with self.fetcher_factory(job.hostname, config) as fetcher:
            while frontier and frontier.visited_count < config.max_pages:
                if cancel is not None and cancel.is_set():
                    logger.info(
                        "Crawl of %s cancelled after %d page(s)",
                        job.seed_url,
                        frontier.visited_count,
                    )
                    raise CrawlCancelled(
                        f"Crawl cancelled after {frontier.visited_count} page(s)"
                    )

                entry = frontier.dequeue_next()
                # Frontier.enqueue already rejects both cases.
                if frontier.is_visited(entry.url) or entry.depth > config.max_depth:
                    continue
                frontier.mark_visited(entry.url)

                logger.info(
                    "[Depth %d, Page %d/%d] Scraping: %s",
                    entry.depth,
                    frontier.visited_count,
                    config.max_pages,
                    entry.url,
                )
                results.append(self._visit(fetcher, frontier, job, entry))

        logger.info(
            "Crawl of %s finished: %d page(s) visited, %d still pending",
            job.seed_url,
            frontier.visited_count,
            len(frontier),
        )
        return CrawlOutcome(
            results=results,
            total_scraped=frontier.visited_count,
            pending=len(frontier),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _visit(
        self,
        fetcher: PageFetcher,
        frontier: Frontier,
        job: CrawlJob,
        entry: FrontierEntry,
    ) -> PageResult:
        config = self.config
        try:
            page = fetcher.fetch(entry.url)
        except PageFetchError as exc:
            logger.warning("Failed to scrape %s: %s", entry.url, exc.message)
            return PageResult(
                url=entry.url,
                depth=entry.depth,
                timestamp=_now_iso(),
                error=exc.short_message,
            )

        full_text = " ".join(page.content)
        keywords = extract_keywords(full_text, config.top_keywords, config.stopwords)

        if entry.depth < config.max_depth:
            for link in page.links:
                if urlparse(link).hostname == job.hostname:
                    frontier.enqueue(link, entry.depth + 1)

        return PageResult(
            url=entry.url,
            depth=entry.depth,
            title=page.title,
            content=tuple(page.content[: config.stored_snippets]),
            found_links=len(page.links),
            keywords=tuple(keywords),
            content_length=len(full_text),
            word_count=count_words(full_text),
            timestamp=_now_iso(),
        )
