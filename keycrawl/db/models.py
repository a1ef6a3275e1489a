"""Dataclass models representing DB rows.

These are plain Python objects, not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from keycrawl.crawler.models import PageResult
from keycrawl.enrichment.models import KeywordTaxonomy

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


@dataclass
class CrawlReport:
    report_id: str
    main_url: str
    domain: str
    status: str
    created_at: int
    updated_at: int
    owner_id: Optional[str] = None
    total_pages_scraped: int = 0
    total_keywords_found: int = 0
    keyword_data: KeywordTaxonomy = field(default_factory=KeywordTaxonomy)
    scraped_pages: list[PageResult] = field(default_factory=list)
    analysis_type: Optional[str] = None
    analysis_error: Optional[str] = None
    completed_at: Optional[int] = None
    processing_time_ms: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in (STATUS_COMPLETED, STATUS_FAILED)

    def to_dict(self) -> dict[str, Any]:
        """Full report, shaped for JSON responses."""
        return {
            "reportId": self.report_id,
            "mainUrl": self.main_url,
            "domain": self.domain,
            "ownerId": self.owner_id,
            "status": self.status,
            "totalPagesScraped": self.total_pages_scraped,
            "totalKeywordsFound": self.total_keywords_found,
            "keywordData": self.keyword_data.to_dict(),
            "scrapedPages": [p.to_dict() for p in self.scraped_pages],
            "analysisType": self.analysis_type,
            "analysisError": self.analysis_error,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "completedAt": self.completed_at,
            "processingTimeMs": self.processing_time_ms,
        }

    def summary(self) -> dict[str, Any]:
        """Listing view without the page payload."""
        return {
            "reportId": self.report_id,
            "mainUrl": self.main_url,
            "domain": self.domain,
            "status": self.status,
            "totalPagesScraped": self.total_pages_scraped,
            "totalKeywordsFound": self.total_keywords_found,
            "primaryKeywords": len(self.keyword_data.primary_keywords),
            "analysisType": self.analysis_type,
            "createdAt": self.created_at,
            "processingTimeMs": self.processing_time_ms,
        }
