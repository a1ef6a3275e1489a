"""Local keyword statistics: text in, ranked word counts out.

Pure functions with no I/O.  The orchestrator runs :func:`extract_keywords`
over each page's joined snippets, and the enrichment fallback reuses the
per-page results when the analysis backend is unavailable.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import AbstractSet, List

from keycrawl.crawler.models import KeywordCount
from keycrawl.crawler.stopwords import DEFAULT_STOPWORDS

# Anything that is not a word character, whitespace or a hyphen.
_PUNCTUATION = re.compile(r"[^\w\s-]")


def tokenize(text: str) -> List[str]:
    """Lower-case *text*, drop punctuation and split on whitespace.

    Hyphens inside a word survive (``long-tail``); hyphens at either end of a
    token are stripped.
    """
    cleaned = _PUNCTUATION.sub(" ", text.lower())
    tokens = (tok.strip("-") for tok in cleaned.split())
    return [tok for tok in tokens if tok]


def count_words(text: str) -> int:
    """Number of whitespace-separated words in *text*."""
    return len(text.split())


def extract_keywords(
    text: str,
    max_keywords: int = 10,
    stopwords: AbstractSet[str] = DEFAULT_STOPWORDS,
) -> List[KeywordCount]:
    """Return the *max_keywords* most frequent non-stopword tokens in *text*.

    Tokens of three characters or fewer are ignored.  Ordering is by
    descending count; equal counts keep the order in which the words first
    appeared.

    Args:
        text: Arbitrary page text.
        max_keywords: How many entries to return at most.
        stopwords: Words to ignore (compared after lower-casing).

    Returns:
        A list of :class:`~keycrawl.crawler.models.KeywordCount`.
    """
    if not text or max_keywords <= 0:
        return []

    words = [
        tok for tok in tokenize(text) if len(tok) > 3 and tok not in stopwords
    ]
    # Counter preserves insertion order and most_common() sorts stably, so
    # ties stay in first-occurrence order.
    counts = Counter(words)
    return [
        KeywordCount(word=word, count=count)
        for word, count in counts.most_common(max_keywords)
    ]
