"""Crawl endpoint.

Routes
------
POST /crawl    Body: {"url": "https://...", "owner_id": "..."}   → run_crawl_job

The handler is a plain ``def`` so FastAPI runs it in its thread pool; a crawl
blocks for as long as it takes, and concurrent requests each get their own
job and report id.

Status codes
------------
200  taxonomy (enriched or fallback; see ``analysis.fallback``)
400  missing or malformed URL
404  the seed page could not be scraped
500  browser unavailable, report write failed, or unexpected error
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from keycrawl.errors import (
    EmptyCrawlError,
    InvalidInputError,
    PersistenceError,
    ResourceError,
)
from keycrawl.service import run_crawl_job

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CrawlRequest(BaseModel):
    # Optional so a missing URL is reported as 400 by the service, not 422.
    url: Optional[str] = None
    owner_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=dict[str, Any])
def crawl_endpoint(body: CrawlRequest, request: Request) -> dict[str, Any]:
    """Crawl the site at ``url`` and return its keyword taxonomy."""
    state = request.app.state
    try:
        result = run_crawl_job(
            state.db,
            body.url,
            orchestrator=state.orchestrator,
            enricher=state.enricher,
            owner_id=body.owner_id,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except EmptyCrawlError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ResourceError as exc:
        raise HTTPException(
            status_code=500, detail=f"Crawler unavailable: {exc}"
        ) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=500, detail="Report could not be saved."
        ) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Crawler failed for %s", body.url)
        raise HTTPException(
            status_code=500,
            detail="An internal server error occurred during the crawl.",
        ) from exc
    return result.to_response()
