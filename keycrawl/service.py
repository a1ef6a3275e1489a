"""Crawl job pipeline: URL in, persisted keyword report out.

``run_crawl_job`` ties the pieces together for one seed URL:

    validate → create report (processing) → crawl → enrich → complete report

and maps every failure onto the report lifecycle:

- invalid seed URL: nothing is written, :class:`InvalidInputError` is raised;
- seed page unreachable: report ``failed``, :class:`EmptyCrawlError`;
- browser unavailable / cancelled / unexpected error: report ``failed``,
  the original exception propagates;
- enrichment failure: recovered with the local fallback taxonomy;
- final write failure: report ``failed``, :class:`PersistenceError`.

After the report row exists, no exception leaves this module with the
report still ``processing``.

The API and the CLI both call this module; neither talks to the orchestrator
directly.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

from keycrawl.config import Settings, settings
from keycrawl.crawler.fetcher import fetcher_factory
from keycrawl.crawler.models import CrawlJob, CrawlOutcome
from keycrawl.crawler.orchestrator import CrawlOrchestrator
from keycrawl.db.models import CrawlReport
from keycrawl.db.reports import complete_report, create_report, fail_report
from keycrawl.enrichment.client import EnrichmentClient
from keycrawl.enrichment.models import EnrichmentResult
from keycrawl.errors import EmptyCrawlError, PersistenceError

logger = logging.getLogger(__name__)

EMPTY_CRAWL_MESSAGE = "Could not find any content on the provided URL."


@dataclass
class CrawlJobResult:
    report: CrawlReport
    outcome: CrawlOutcome
    enrichment: EnrichmentResult

    def to_response(self) -> dict[str, Any]:
        """Body returned by ``POST /crawl``."""
        return {
            "success": True,
            "data": self.enrichment.taxonomy.to_dict(),
            "mainUrl": self.report.main_url,
            "totalScraped": self.outcome.total_scraped,
            "reportId": self.report.report_id,
            "analysis": {
                "sentToExternal": not self.enrichment.fallback,
                "fallback": self.enrichment.fallback,
                "error": self.enrichment.error,
            },
        }


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_orchestrator(cfg: Optional[Settings] = None) -> CrawlOrchestrator:
    """Orchestrator wired to the configured fetcher backend and budgets."""
    cfg = cfg or settings
    return CrawlOrchestrator(
        fetcher_factory(cfg.fetcher_backend, user_agent=cfg.user_agent),
        cfg.crawl_config(),
    )


def build_enricher(cfg: Optional[Settings] = None) -> EnrichmentClient:
    """Enrichment client pointed at the configured analysis backend."""
    cfg = cfg or settings
    return EnrichmentClient(cfg.analysis_webhook_url, timeout=cfg.analysis_timeout)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _mark_failed(
    conn: sqlite3.Connection,
    report_id: str,
    reason: str,
    started: float,
    outcome: Optional[CrawlOutcome] = None,
) -> None:
    """Record a failed job.  A write error here is logged, not raised, so the
    caller still sees the original failure."""
    try:
        fail_report(
            conn,
            report_id,
            reason,
            scraped_pages=outcome.results if outcome else (),
            total_pages_scraped=outcome.total_scraped if outcome else 0,
            processing_time_ms=_elapsed_ms(started),
        )
    except TypeError:
        logger.exception("Could not store pages of failed report %s", report_id)
        if outcome is not None:
            # Retry without the unserialisable pages so the status still moves.
            _mark_failed(conn, report_id, reason, started)
    except (sqlite3.Error, ValueError):
        logger.exception("Could not mark report %s as failed", report_id)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def run_crawl_job(
    conn: sqlite3.Connection,
    url: Optional[str],
    *,
    orchestrator: CrawlOrchestrator,
    enricher: EnrichmentClient,
    owner_id: Optional[str] = None,
    cancel: Optional[threading.Event] = None,
) -> CrawlJobResult:
    """Crawl *url*, enrich the results and persist the finished report.

    Args:
        conn: Open, initialised DB connection.
        url: Seed URL as supplied by the caller (validated here).
        orchestrator: Runs the breadth-first crawl.
        enricher: Turns page results into a keyword taxonomy.
        owner_id: Requesting user, or ``None`` for anonymous crawls.
        cancel: Optional event that stops the crawl between pages.

    Returns:
        The completed report together with the crawl outcome and the
        enrichment result.

    Raises:
        InvalidInputError: *url* is missing or malformed.  No report written.
        EmptyCrawlError: The seed page could not be scraped.
        ResourceError: The fetcher session could not be acquired.
        CrawlCancelled: *cancel* was set mid-crawl.
        PersistenceError: The initial or final report write failed.

    Any other exception raised after the report is created marks it
    ``failed`` and propagates unchanged.
    """
    job = CrawlJob.from_url(url)
    started = time.monotonic()

    try:
        report = create_report(conn, job.seed_url, owner_id=owner_id)
    except sqlite3.Error as exc:
        logger.exception("Could not create report for %s", job.seed_url)
        raise PersistenceError(f"Could not create report: {exc}") from exc
    report_id = report.report_id
    logger.info("Starting crawl for %s (report %s)", job.seed_url, report_id)

    try:
        outcome = orchestrator.crawl(job.seed_url, cancel=cancel)
    except Exception as exc:
        logger.error("Crawl for report %s aborted: %s", report_id, exc)
        _mark_failed(conn, report_id, str(exc) or exc.__class__.__name__, started)
        raise

    if not outcome.results or not outcome.results[0].ok:
        logger.warning("Seed page %s could not be scraped", job.seed_url)
        _mark_failed(conn, report_id, EMPTY_CRAWL_MESSAGE, started, outcome)
        raise EmptyCrawlError(EMPTY_CRAWL_MESSAGE)

    try:
        enrichment = enricher.enrich(outcome.results)
    except Exception as exc:
        logger.exception("Enrichment for report %s raised", report_id)
        _mark_failed(conn, report_id, str(exc) or exc.__class__.__name__, started, outcome)
        raise

    try:
        report = complete_report(
            conn,
            report_id,
            keyword_data=enrichment.taxonomy,
            scraped_pages=outcome.results,
            total_pages_scraped=outcome.total_scraped,
            analysis_type=enrichment.analysis_type,
            analysis_error=enrichment.error,
            processing_time_ms=_elapsed_ms(started),
        )
    except (sqlite3.Error, ValueError) as exc:
        logger.exception("Could not save completed report %s", report_id)
        _mark_failed(conn, report_id, f"Report could not be saved: {exc}", started, outcome)
        raise PersistenceError(f"Could not save report {report_id}: {exc}") from exc
    except Exception as exc:
        logger.exception("Could not save completed report %s", report_id)
        _mark_failed(conn, report_id, str(exc) or exc.__class__.__name__, started, outcome)
        raise

    logger.info(
        "Report %s completed: %d page(s), analysis=%s",
        report_id,
        outcome.total_scraped,
        enrichment.analysis_type,
    )
    return CrawlJobResult(report=report, outcome=outcome, enrichment=enrichment)
