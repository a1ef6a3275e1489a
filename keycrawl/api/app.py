"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests via ``request.app.state.db``), initialises the schema, and builds
the crawl orchestrator and enrichment client from settings
(``app.state.orchestrator`` / ``app.state.enricher``).  On shutdown it closes
the connection cleanly.

Routers
-------
    /crawl      run a crawl job and return its keyword taxonomy
    /report(s)  report retrieval, listing and deletion
"""

from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from keycrawl.config import settings
from keycrawl.db import get_connection, init_db
from keycrawl.logging_setup import setup_logging
from keycrawl.service import build_enricher, build_orchestrator

from keycrawl.api.routers import crawl as crawl_router
from keycrawl.api.routers import reports as reports_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the DB and build the pipeline on startup; close the DB on shutdown."""
    setup_logging(settings.log_level)
    conn = get_connection()
    init_db(conn)
    app.state.db = conn
    app.state.orchestrator = build_orchestrator()
    app.state.enricher = build_enricher()
    try:
        yield
    finally:
        conn.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="keycrawl API",
        description=(
            "Crawls a site breadth-first, extracts page text and local keyword "
            "statistics, asks an external analysis backend for a keyword "
            "taxonomy, and stores the result as a report."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(crawl_router.router, prefix="/crawl", tags=["crawl"])
    app.include_router(reports_router.router, tags=["reports"])

    @app.get("/health", tags=["health"])
    def health(request: Request) -> dict[str, Any]:
        """Liveness plus a trivial DB round-trip."""
        try:
            request.app.state.db.execute("SELECT 1").fetchone()
            database = "connected"
        except sqlite3.Error:
            database = "disconnected"
        return {"status": "ok", "database": database}

    return app


# Module-level instance used by uvicorn:
#   uvicorn keycrawl.api.app:app --reload
app = create_app()
