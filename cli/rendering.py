"""Plain-text rendering of reports and taxonomies for the CLI."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from keycrawl.db.models import CrawlReport
from keycrawl.enrichment.models import INTENT_CATEGORIES, KEYWORD_GROUPS, KeywordTaxonomy

_STATUS_ICONS = {"processing": "⏳", "completed": "✅", "failed": "❌"}


def _fmt_ts(ts: int | None) -> str:
    if not ts:
        return "-"
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _label(name: str) -> str:
    # "long_tail_keywords" -> "Long tail"
    return name.replace("_keywords", "").replace("_", " ").capitalize()


def render_taxonomy(taxonomy: KeywordTaxonomy) -> str:
    """Render keyword groups, then intents, skipping empty lists."""
    lines: List[str] = []
    for name in KEYWORD_GROUPS:
        words = getattr(taxonomy, name)
        if words:
            lines.append(f"{_label(name)}: {', '.join(words)}")
    for name in INTENT_CATEGORIES:
        words = getattr(taxonomy.keyword_intent, name)
        if words:
            lines.append(f"Intent/{name}: {', '.join(words)}")
    return "\n".join(lines) if lines else "(no keywords)"


def render_summary_line(report: CrawlReport) -> str:
    icon = _STATUS_ICONS.get(report.status, "?")
    return (
        f"{icon} {report.report_id}  {report.main_url}  "
        f"pages={report.total_pages_scraped}  keywords={report.total_keywords_found}  "
        f"{_fmt_ts(report.created_at)}"
    )


def render_report(report: CrawlReport) -> str:
    """Render a report header, its taxonomy and one line per page."""
    lines = [
        render_summary_line(report),
        f"  domain     : {report.domain}",
        f"  status     : {report.status}",
        f"  analysis   : {report.analysis_type or '-'}",
        f"  duration   : {report.processing_time_ms} ms",
    ]
    if report.analysis_error:
        lines.append(f"  note       : {report.analysis_error}")
    lines.append("")
    lines.append(render_taxonomy(report.keyword_data))
    if report.scraped_pages:
        lines.append("")
        lines.append("Pages:")
        for page in report.scraped_pages:
            if page.ok:
                lines.append(f"  [d{page.depth}] {page.url}  ({page.word_count} words)")
            else:
                lines.append(f"  [d{page.depth}] {page.url}  ! {page.error}")
    return "\n".join(lines)
