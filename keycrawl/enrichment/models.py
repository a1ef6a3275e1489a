"""Keyword taxonomy produced once per crawl, by the backend or the fallback."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

INTENT_CATEGORIES = ("informational", "navigational", "transactional", "commercial")
KEYWORD_GROUPS = (
    "primary_keywords",
    "secondary_keywords",
    "long_tail_keywords",
    "related_keywords",
)

ANALYSIS_ENRICHED = "enriched"
ANALYSIS_FALLBACK = "fallback"


@dataclass
class KeywordIntent:
    informational: List[str] = field(default_factory=list)
    navigational: List[str] = field(default_factory=list)
    transactional: List[str] = field(default_factory=list)
    commercial: List[str] = field(default_factory=list)


@dataclass
class KeywordTaxonomy:
    primary_keywords: List[str] = field(default_factory=list)
    secondary_keywords: List[str] = field(default_factory=list)
    long_tail_keywords: List[str] = field(default_factory=list)
    related_keywords: List[str] = field(default_factory=list)
    keyword_intent: KeywordIntent = field(default_factory=KeywordIntent)

    @property
    def total_keywords(self) -> int:
        """Number of keywords across the four keyword groups."""
        return sum(len(getattr(self, name)) for name in KEYWORD_GROUPS)

    def is_empty(self) -> bool:
        intent_total = sum(
            len(getattr(self.keyword_intent, name)) for name in INTENT_CATEGORIES
        )
        return self.total_keywords == 0 and intent_total == 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {name: list(getattr(self, name)) for name in KEYWORD_GROUPS}
        data["keyword_intent"] = {
            name: list(getattr(self.keyword_intent, name)) for name in INTENT_CATEGORIES
        }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KeywordTaxonomy":
        intent = data.get("keyword_intent") or {}
        return cls(
            **{name: list(data.get(name) or []) for name in KEYWORD_GROUPS},
            keyword_intent=KeywordIntent(
                **{name: list(intent.get(name) or []) for name in INTENT_CATEGORIES}
            ),
        )


@dataclass
class EnrichmentResult:
    """A taxonomy plus a record of which path produced it."""

    taxonomy: KeywordTaxonomy
    analysis_type: str
    error: Optional[str] = None

    @property
    def fallback(self) -> bool:
        return self.analysis_type == ANALYSIS_FALLBACK
