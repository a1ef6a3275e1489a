"""keycrawl CLI entry-point.

Usage:
    python cli/main.py --help

Command groups:
    db        → database setup
    crawl     → run a crawl job and store its report
    keywords  → local keyword statistics for a piece of text
    report    → inspect, list and delete stored reports
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from keycrawl.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working
# directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
from typing import Optional

import typer

from keycrawl.config import settings
from keycrawl.crawler.keywords import extract_keywords
from keycrawl.db import get_connection, init_db
from keycrawl.errors import EmptyCrawlError, KeycrawlError
from keycrawl.logging_setup import setup_logging

from cli.commands.report import report_app
from cli.rendering import render_taxonomy

app = typer.Typer(
    name="keycrawl",
    help="keycrawl site crawler and keyword report CLI.",
    no_args_is_help=True,
)
app.add_typer(report_app, name="report")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Configure logging before any command runs."""
    setup_logging("DEBUG" if verbose else settings.log_level)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Crawl
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl(
    url: str = typer.Option(..., help="Seed URL to crawl."),
    owner: Optional[str] = typer.Option(None, help="Owner id stored on the report."),
    as_json: bool = typer.Option(False, "--json", help="Print the API response body as JSON."),
) -> None:
    """Crawl a site, enrich its keywords and store the report."""
    from keycrawl.service import build_enricher, build_orchestrator, run_crawl_job

    conn = get_connection()
    init_db(conn)
    typer.echo(f"[crawl] Crawling {url!r} …", err=as_json)
    try:
        result = run_crawl_job(
            conn,
            url,
            orchestrator=build_orchestrator(),
            enricher=build_enricher(),
            owner_id=owner,
        )
    except EmptyCrawlError as exc:
        typer.echo(f"[crawl] {exc}", err=True)
        raise typer.Exit(2)
    except KeycrawlError as exc:
        typer.echo(f"[crawl] Failed: {exc}", err=True)
        raise typer.Exit(1)
    finally:
        conn.close()

    if as_json:
        typer.echo(json.dumps(result.to_response(), indent=2))
        return

    typer.echo(f"[crawl] Report  : {result.report.report_id}")
    typer.echo(f"[crawl] Pages   : {result.outcome.total_scraped}")
    if result.enrichment.fallback:
        typer.echo(f"[crawl] Analysis: fallback ({result.enrichment.error})")
    else:
        typer.echo("[crawl] Analysis: enriched")
    typer.echo("")
    typer.echo(render_taxonomy(result.enrichment.taxonomy))


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------
@app.command("keywords")
def keywords(
    text: str = typer.Option(..., help="Text to analyse."),
    top: int = typer.Option(10, help="Number of keywords to show."),
) -> None:
    """Print the most frequent keywords in TEXT."""
    ranked = extract_keywords(text, max_keywords=top)
    if not ranked:
        typer.echo("[keywords] No keywords found.")
        return
    for kw in ranked:
        typer.echo(f"  {kw.count:>4}  {kw.word}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
