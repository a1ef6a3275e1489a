"""External keyword analysis with a local fallback."""

from keycrawl.enrichment.client import EnrichmentClient, fallback_taxonomy
from keycrawl.enrichment.models import EnrichmentResult, KeywordIntent, KeywordTaxonomy
from keycrawl.enrichment.parser import normalize_taxonomy, unwrap_response

__all__ = [
    "EnrichmentClient",
    "EnrichmentResult",
    "KeywordIntent",
    "KeywordTaxonomy",
    "fallback_taxonomy",
    "normalize_taxonomy",
    "unwrap_response",
]
