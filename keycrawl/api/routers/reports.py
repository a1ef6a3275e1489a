"""Report retrieval endpoints.

Routes
------
GET    /report/{report_id}            Full report
DELETE /report/{report_id}            Delete a report
GET    /reports/domain/{domain}       Recent report summaries for a domain
GET    /reports/url?url=...           Report summaries for one seed URL (paginated)
GET    /reports                       All report summaries (paginated, ?status=)
"""

from __future__ import annotations

import math
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from keycrawl.db.reports import (
    count_reports,
    delete_report,
    get_report,
    list_reports,
    list_reports_by_domain,
    list_reports_by_url,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _pagination(page: int, limit: int, total: int) -> dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/report/{report_id}", response_model=dict[str, Any])
def get_report_endpoint(report_id: str, request: Request) -> dict[str, Any]:
    """Return the full report including every scraped page."""
    report = get_report(request.app.state.db, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Report '{report_id}' not found.")
    return {"success": True, "data": report.to_dict()}


@router.delete("/report/{report_id}", response_model=dict[str, Any])
def delete_report_endpoint(report_id: str, request: Request) -> dict[str, Any]:
    """Delete a report by id."""
    if not delete_report(request.app.state.db, report_id):
        raise HTTPException(status_code=404, detail=f"Report '{report_id}' not found.")
    return {"success": True, "message": "Report deleted successfully"}


@router.get("/reports/domain/{domain}", response_model=dict[str, Any])
def list_domain_reports_endpoint(
    domain: str,
    request: Request,
    limit: int = Query(5, ge=1, le=100),
) -> dict[str, Any]:
    """Return summaries of the most recent reports for *domain*."""
    reports = list_reports_by_domain(request.app.state.db, domain, limit=limit)
    return {"success": True, "data": [r.summary() for r in reports]}


@router.get("/reports/url", response_model=dict[str, Any])
def list_url_reports_endpoint(
    request: Request,
    url: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
) -> dict[str, Any]:
    """Return summaries of reports whose seed URL is exactly *url*."""
    conn = request.app.state.db
    reports = list_reports_by_url(conn, url, limit=limit, page=page)
    total = count_reports(conn, main_url=url)
    return {
        "success": True,
        "data": [r.summary() for r in reports],
        "pagination": _pagination(page, limit, total),
    }


@router.get("/reports", response_model=dict[str, Any])
def list_reports_endpoint(
    request: Request,
    status: Optional[str] = None,
    owner_id: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
) -> dict[str, Any]:
    """Return summaries of all reports, newest first."""
    conn = request.app.state.db
    try:
        reports = list_reports(
            conn, status=status, owner_id=owner_id, limit=limit, page=page
        )
        total = count_reports(conn, status=status, owner_id=owner_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "success": True,
        "data": [r.summary() for r in reports],
        "pagination": _pagination(page, limit, total),
    }
