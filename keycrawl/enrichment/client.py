"""Client for the external keyword analysis backend.

``EnrichmentClient.enrich`` posts the full crawl result set to the backend
and waits (minutes, not seconds; the backend calls a language model) for a
keyword taxonomy.  Any failure, whether transport, status, timeout or an
unusable reply, is logged and answered with :func:`fallback_taxonomy`, which
is built from the pages' local keyword statistics.  ``enrich`` never raises.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Sequence

import httpx

from keycrawl.crawler.models import PageResult
from keycrawl.enrichment.models import (
    ANALYSIS_ENRICHED,
    ANALYSIS_FALLBACK,
    EnrichmentResult,
    KeywordTaxonomy,
)
from keycrawl.enrichment.parser import normalize_taxonomy, unwrap_response
from keycrawl.errors import EnrichmentError

logger = logging.getLogger(__name__)

ANALYSIS_TYPE_TAG = "keyword_and_content_analysis"
FALLBACK_MESSAGE = (
    "Could not fetch detailed analysis from the analysis backend. "
    "Displaying basic keywords."
)
FALLBACK_PRIMARY_LIMIT = 10


def build_payload(pages: Sequence[PageResult]) -> dict[str, Any]:
    """Request body sent to the analysis backend."""
    return {
        "analysisType": ANALYSIS_TYPE_TAG,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "totalPages": len(pages),
        "data": [page.to_dict() for page in pages],
    }


def fallback_taxonomy(pages: Iterable[PageResult]) -> KeywordTaxonomy:
    """Taxonomy built from local statistics alone.

    ``primary_keywords`` is the union of every successful page's top
    keywords, deduplicated in page-then-rank order and capped at ten.  The
    other groups stay empty.
    """
    primary: List[str] = []
    seen: set[str] = set()
    for page in pages:
        if not page.ok:
            continue
        for kw in page.keywords:
            if kw.word not in seen:
                seen.add(kw.word)
                primary.append(kw.word)
    return KeywordTaxonomy(primary_keywords=primary[:FALLBACK_PRIMARY_LIMIT])


class EnrichmentClient:
    """POST crawl results to *webhook_url* and normalise the reply.

    An empty *webhook_url* disables the backend; every call then returns the
    fallback taxonomy.
    """

    def __init__(self, webhook_url: str, timeout: float = 220.0) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout

    def _request(self, pages: Sequence[PageResult]) -> Any:
        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(self.webhook_url, json=build_payload(pages))
            response.raise_for_status()
            return response.json()

    def analyse(self, pages: Sequence[PageResult]) -> KeywordTaxonomy:
        """Call the backend and return its normalised taxonomy.

        Raises:
            EnrichmentError: On any transport, status, or parsing failure.
        """
        if not self.webhook_url:
            raise EnrichmentError("No analysis backend configured")

        logger.info("Sending %d page(s) to analysis backend", len(pages))
        try:
            body = self._request(pages)
        except httpx.TimeoutException as exc:
            raise EnrichmentError(f"Analysis backend timed out after {self.timeout}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise EnrichmentError(f"Analysis backend request failed: {exc}") from exc
        except ValueError as exc:
            raise EnrichmentError(f"Analysis backend returned invalid JSON: {exc}") from exc

        return normalize_taxonomy(unwrap_response(body))

    def enrich(self, pages: Sequence[PageResult]) -> EnrichmentResult:
        """Return the backend taxonomy, or the local fallback on any failure."""
        try:
            taxonomy = self.analyse(pages)
        except EnrichmentError as exc:
            logger.warning("Enrichment failed, using local keywords: %s", exc)
            return EnrichmentResult(
                taxonomy=fallback_taxonomy(pages),
                analysis_type=ANALYSIS_FALLBACK,
                error=FALLBACK_MESSAGE,
            )

        logger.info(
            "Analysis backend returned %d keyword(s)", taxonomy.total_keywords
        )
        return EnrichmentResult(taxonomy=taxonomy, analysis_type=ANALYSIS_ENRICHED)
