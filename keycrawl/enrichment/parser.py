"""Two-stage parsing of analysis backend responses.

The backend wraps a language model, so its reply is untrusted:

1. :func:`unwrap_response` pulls the single ``output`` string out of the
   response body and strips a Markdown code fence if one is present.
2. :func:`normalize_taxonomy` parses that string as JSON and coerces it into
   a :class:`KeywordTaxonomy`, tolerating missing fields and keyword entries
   given either as strings or as ``{"keyword": ...}`` objects.

Both raise :class:`~keycrawl.errors.EnrichmentError` on input they cannot
use; the client turns that into the fallback taxonomy.
"""

from __future__ import annotations

import json
import re
from typing import Any, List

from keycrawl.enrichment.models import (
    INTENT_CATEGORIES,
    KEYWORD_GROUPS,
    KeywordIntent,
    KeywordTaxonomy,
)
from keycrawl.errors import EnrichmentError

# ```json ... ``` with an optional language tag on the opening fence.
_FENCE_OPEN = re.compile(r"^```[\w+-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def strip_fence(text: str) -> str:
    """Remove a leading ```` ```lang ```` and trailing ```` ``` ```` marker."""
    text = text.strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def unwrap_response(body: Any) -> str:
    """Return the fence-stripped ``output`` string from a backend response.

    A one-element list around the object is accepted, since webhook runners
    commonly return their items as an array.

    Raises:
        EnrichmentError: If *body* has no string ``output`` field.
    """
    if isinstance(body, list) and len(body) == 1:
        body = body[0]
    if not isinstance(body, dict):
        raise EnrichmentError(
            f"Expected a JSON object from the analysis backend, got {type(body).__name__}"
        )
    output = body.get("output")
    if not isinstance(output, str) or not output.strip():
        raise EnrichmentError("Analysis backend response has no 'output' string")
    return strip_fence(output)


def _keyword_list(value: Any) -> List[str]:
    """Coerce a list of strings / keyword objects into unique strings."""
    if not isinstance(value, list):
        return []
    seen: set[str] = set()
    keywords: List[str] = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("keyword") or item.get("word")
        if not isinstance(item, str):
            continue
        keyword = item.strip()
        if keyword and keyword not in seen:
            seen.add(keyword)
            keywords.append(keyword)
    return keywords


def normalize_taxonomy(text: str) -> KeywordTaxonomy:
    """Parse the unwrapped backend output into a :class:`KeywordTaxonomy`.

    Raises:
        EnrichmentError: If *text* is not a JSON object, or it yields no
            keywords at all.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise EnrichmentError(f"Analysis output is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise EnrichmentError("Analysis output is not a JSON object")

    intent = data.get("keyword_intent")
    if not isinstance(intent, dict):
        intent = {}

    taxonomy = KeywordTaxonomy(
        **{name: _keyword_list(data.get(name)) for name in KEYWORD_GROUPS},
        keyword_intent=KeywordIntent(
            **{name: _keyword_list(intent.get(name)) for name in INTENT_CATEGORIES}
        ),
    )
    if taxonomy.is_empty():
        raise EnrichmentError("Analysis output contains no keywords")
    return taxonomy
