"""Report commands: show, list and delete stored crawl reports."""

import json
from typing import Optional

import typer

from keycrawl.db import get_connection, init_db
from keycrawl.db.reports import (
    delete_report,
    get_report,
    list_reports,
    list_reports_by_domain,
)
from cli.rendering import render_report, render_summary_line

report_app = typer.Typer(help="Inspect stored crawl reports.", no_args_is_help=True)


@report_app.command("show")
def report_show(
    report_id: str = typer.Argument(..., help="Report id (KR_...)."),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON."),
) -> None:
    """Show one report."""
    conn = get_connection()
    init_db(conn)
    try:
        report = get_report(conn, report_id)
    finally:
        conn.close()

    if report is None:
        typer.echo(f"❌ Report not found: {report_id}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        typer.echo(render_report(report))


@report_app.command("list")
def report_list(
    domain: Optional[str] = typer.Option(None, help="Only reports for this domain."),
    url: Optional[str] = typer.Option(None, help="Only reports for this exact seed URL."),
    status: Optional[str] = typer.Option(None, help="processing | completed | failed"),
    limit: int = typer.Option(10, help="Maximum number of reports."),
) -> None:
    """List recent reports, newest first."""
    conn = get_connection()
    init_db(conn)
    try:
        if domain:
            reports = list_reports_by_domain(conn, domain, limit=limit)
        else:
            reports = list_reports(conn, status=status, main_url=url, limit=limit)
    except ValueError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)
    finally:
        conn.close()

    if not reports:
        typer.echo("No reports found.")
        return
    for report in reports:
        typer.echo(render_summary_line(report))


@report_app.command("delete")
def report_delete(
    report_id: str = typer.Argument(..., help="Report id (KR_...)."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete a report."""
    if not yes:
        typer.confirm(f"Delete report {report_id}?", abort=True)

    conn = get_connection()
    init_db(conn)
    try:
        deleted = delete_report(conn, report_id)
    finally:
        conn.close()

    if not deleted:
        typer.echo(f"❌ Report not found: {report_id}")
        raise typer.Exit(code=1)
    typer.echo(f"🗑️  Deleted report {report_id}")
