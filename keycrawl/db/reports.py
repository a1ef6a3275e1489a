"""CRUD and lifecycle operations for the ``reports`` table.

A report is written with ``status='processing'`` before crawling starts, so
an interrupted job is still visible, and then moved exactly once to
``completed`` or ``failed``::

    processing ──success──▶ completed
        │
        └──────failure──▶ failed

Any other transition raises :class:`~keycrawl.errors.InvalidTransitionError`.
Writes go through a module lock; jobs running in parallel threads may share
one connection.
"""

from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from time import time
from typing import Any, Optional, Sequence

from keycrawl.crawler.models import PageResult, domain_of
from keycrawl.db.models import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PROCESSING,
    CrawlReport,
)
from keycrawl.enrichment.models import KeywordTaxonomy
from keycrawl.errors import InvalidTransitionError, ReportNotFoundError

_write_lock = threading.RLock()

VALID_STATUSES = (STATUS_PROCESSING, STATUS_COMPLETED, STATUS_FAILED)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def generate_report_id() -> str:
    """Return a new id of the form ``KR_<epoch ms>_<9 hex chars>``."""
    return f"KR_{int(time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _row_to_report(row: sqlite3.Row) -> CrawlReport:
    return CrawlReport(
        report_id=row["report_id"],
        main_url=row["main_url"],
        domain=row["domain"],
        owner_id=row["owner_id"],
        status=row["status"],
        total_pages_scraped=row["total_pages_scraped"],
        total_keywords_found=row["total_keywords_found"],
        keyword_data=KeywordTaxonomy.from_dict(json.loads(row["keyword_data"] or "{}")),
        scraped_pages=[
            PageResult.from_dict(p) for p in json.loads(row["scraped_pages"] or "[]")
        ],
        analysis_type=row["analysis_type"],
        analysis_error=row["analysis_error"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        completed_at=row["completed_at"],
        processing_time_ms=row["processing_time_ms"],
    )


def _pages_json(pages: Sequence[PageResult]) -> str:
    return json.dumps([p.to_dict() for p in pages])


def _require_processing(conn: sqlite3.Connection, report_id: str, target: str) -> None:
    row = conn.execute(
        "SELECT status FROM reports WHERE report_id = ?", (report_id,)
    ).fetchone()
    if row is None:
        raise ReportNotFoundError(f"Report not found: {report_id!r}")
    if row["status"] != STATUS_PROCESSING:
        raise InvalidTransitionError(
            f"Report {report_id!r} is {row['status']!r}; cannot move to {target!r}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_report(
    conn: sqlite3.Connection,
    main_url: str,
    owner_id: Optional[str] = None,
    report_id: Optional[str] = None,
) -> CrawlReport:
    """Insert a ``processing`` report for *main_url* and return it.

    Args:
        conn: Open DB connection.
        main_url: The crawl's seed URL.
        owner_id: Identity of the requesting user; ``None`` for anonymous
            crawls.
        report_id: Explicit id override (generated when omitted).
    """
    rid = report_id or generate_report_id()
    now = int(time())

    with _write_lock, conn:
        conn.execute(
            """
            INSERT INTO reports (report_id, main_url, domain, owner_id, status,
                                 created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (rid, main_url, domain_of(main_url), owner_id, STATUS_PROCESSING, now, now),
        )

    return get_report(conn, rid)  # type: ignore[return-value]


def complete_report(
    conn: sqlite3.Connection,
    report_id: str,
    *,
    keyword_data: KeywordTaxonomy,
    scraped_pages: Sequence[PageResult],
    total_pages_scraped: int,
    analysis_type: str,
    analysis_error: Optional[str] = None,
    processing_time_ms: int = 0,
) -> CrawlReport:
    """Move a ``processing`` report to ``completed`` with its full payload.

    Raises:
        ReportNotFoundError: If *report_id* does not exist.
        InvalidTransitionError: If the report is not ``processing``.
    """
    now = int(time())
    with _write_lock, conn:
        _require_processing(conn, report_id, STATUS_COMPLETED)
        conn.execute(
            """
            UPDATE reports
               SET status = ?, total_pages_scraped = ?, total_keywords_found = ?,
                   keyword_data = ?, scraped_pages = ?, analysis_type = ?,
                   analysis_error = ?, processing_time_ms = ?,
                   completed_at = ?, updated_at = ?
             WHERE report_id = ?
            """,
            (
                STATUS_COMPLETED,
                total_pages_scraped,
                keyword_data.total_keywords,
                json.dumps(keyword_data.to_dict()),
                _pages_json(scraped_pages),
                analysis_type,
                analysis_error,
                processing_time_ms,
                now,
                now,
                report_id,
            ),
        )

    return get_report(conn, report_id)  # type: ignore[return-value]


def fail_report(
    conn: sqlite3.Connection,
    report_id: str,
    reason: str,
    *,
    scraped_pages: Sequence[PageResult] = (),
    total_pages_scraped: int = 0,
    processing_time_ms: int = 0,
) -> CrawlReport:
    """Move a ``processing`` report to ``failed``, keeping any partial pages.

    Raises:
        ReportNotFoundError: If *report_id* does not exist.
        InvalidTransitionError: If the report is not ``processing``.
    """
    now = int(time())
    with _write_lock, conn:
        _require_processing(conn, report_id, STATUS_FAILED)
        conn.execute(
            """
            UPDATE reports
               SET status = ?, total_pages_scraped = ?, scraped_pages = ?,
                   analysis_error = ?, processing_time_ms = ?,
                   completed_at = ?, updated_at = ?
             WHERE report_id = ?
            """,
            (
                STATUS_FAILED,
                total_pages_scraped,
                _pages_json(scraped_pages),
                reason,
                processing_time_ms,
                now,
                now,
                report_id,
            ),
        )

    return get_report(conn, report_id)  # type: ignore[return-value]


def get_report(conn: sqlite3.Connection, report_id: str) -> Optional[CrawlReport]:
    """Fetch a single report by id.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM reports WHERE report_id = ?", (report_id,)
    ).fetchone()
    return _row_to_report(row) if row else None


def delete_report(conn: sqlite3.Connection, report_id: str) -> bool:
    """Delete a report.  Returns ``False`` if it did not exist."""
    with _write_lock, conn:
        cursor = conn.execute("DELETE FROM reports WHERE report_id = ?", (report_id,))
    return cursor.rowcount > 0


def list_reports_by_domain(
    conn: sqlite3.Connection,
    domain: str,
    limit: int = 5,
) -> list[CrawlReport]:
    """Return the most recent reports for *domain* (``www.`` is ignored)."""
    rows = conn.execute(
        """
        SELECT * FROM reports WHERE domain = ?
         ORDER BY created_at DESC, rowid DESC LIMIT ?
        """,
        (domain_of(domain), limit),
    ).fetchall()
    return [_row_to_report(r) for r in rows]


def _filters(
    status: Optional[str],
    main_url: Optional[str],
    owner_id: Optional[str],
) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    if status:
        if status not in VALID_STATUSES:
            raise ValueError(f"Unknown status {status!r}")
        clauses.append("status = ?")
        params.append(status)
    if main_url:
        clauses.append("main_url = ?")
        params.append(main_url)
    if owner_id:
        clauses.append("owner_id = ?")
        params.append(owner_id)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def list_reports(
    conn: sqlite3.Connection,
    status: Optional[str] = None,
    main_url: Optional[str] = None,
    owner_id: Optional[str] = None,
    limit: int = 10,
    page: int = 1,
) -> list[CrawlReport]:
    """Return one page of reports, newest first, optionally filtered.

    Raises:
        ValueError: If *status* is not a known report status.
    """
    where, params = _filters(status, main_url, owner_id)
    offset = max(page - 1, 0) * limit
    rows = conn.execute(
        f"SELECT * FROM reports {where} "  # noqa: S608
        "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
        (*params, limit, offset),
    ).fetchall()
    return [_row_to_report(r) for r in rows]


def list_reports_by_url(
    conn: sqlite3.Connection,
    url: str,
    limit: int = 10,
    page: int = 1,
) -> list[CrawlReport]:
    """Return one page of reports whose seed URL is exactly *url*."""
    return list_reports(conn, main_url=url, limit=limit, page=page)


def count_reports(
    conn: sqlite3.Connection,
    status: Optional[str] = None,
    main_url: Optional[str] = None,
    owner_id: Optional[str] = None,
) -> int:
    """Number of reports matching the same filters as :func:`list_reports`."""
    where, params = _filters(status, main_url, owner_id)
    row = conn.execute(
        f"SELECT COUNT(*) FROM reports {where}", params  # noqa: S608
    ).fetchone()
    return row[0] if row else 0
