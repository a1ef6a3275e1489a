"""Tests for the analysis backend client and its response parser.

``respx`` stands in for the backend; no request leaves the process.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from keycrawl.crawler.models import KeywordCount, PageResult
from keycrawl.enrichment.client import (
    ANALYSIS_TYPE_TAG,
    FALLBACK_MESSAGE,
    EnrichmentClient,
    build_payload,
    fallback_taxonomy,
)
from keycrawl.enrichment.models import KeywordTaxonomy
from keycrawl.enrichment.parser import normalize_taxonomy, strip_fence, unwrap_response
from keycrawl.errors import EnrichmentError

WEBHOOK = "https://analysis.test/webhook/keywords"

_TAXONOMY = {
    "primary_keywords": ["solar panels", "home batteries"],
    "secondary_keywords": [{"keyword": "inverters"}, "grid tie"],
    "long_tail_keywords": ["best home battery for solar panels"],
    "related_keywords": [],
    "keyword_intent": {
        "informational": ["how solar panels work"],
        "transactional": ["buy home battery"],
    },
}


def _page(url: str, words: list[str], error: str | None = None) -> PageResult:
    return PageResult(
        url=url,
        depth=0,
        keywords=tuple(KeywordCount(word=w, count=len(words) - i) for i, w in enumerate(words)),
        error=error,
    )


_PAGES = [
    _page("https://site.test/", ["solar", "battery", "energy"]),
    _page("https://site.test/a", ["battery", "inverter"]),
]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class TestStripFence:
    def test_strips_json_fence(self) -> None:
        assert strip_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence(self) -> None:
        assert strip_fence('```\n{"a": 1}\n```  ') == '{"a": 1}'

    def test_leaves_plain_text_alone(self) -> None:
        assert strip_fence('  {"a": 1} ') == '{"a": 1}'


class TestUnwrapResponse:
    def test_object_with_output(self) -> None:
        assert unwrap_response({"output": '```json\n{"x": 1}\n```'}) == '{"x": 1}'

    def test_single_element_list(self) -> None:
        assert unwrap_response([{"output": "{}"}]) == "{}"

    @pytest.mark.parametrize(
        "body",
        [
            None,
            "text",
            [],
            [{"output": "{}"}, {"output": "{}"}],
            {"result": "{}"},
            {"output": 42},
            {"output": "   "},
        ],
    )
    def test_rejects_wrong_shapes(self, body) -> None:
        with pytest.raises(EnrichmentError):
            unwrap_response(body)


class TestNormalizeTaxonomy:
    def test_full_taxonomy(self) -> None:
        taxonomy = normalize_taxonomy(json.dumps(_TAXONOMY))
        assert taxonomy.primary_keywords == ["solar panels", "home batteries"]
        assert taxonomy.secondary_keywords == ["inverters", "grid tie"]
        assert taxonomy.keyword_intent.informational == ["how solar panels work"]
        assert taxonomy.keyword_intent.commercial == []
        assert taxonomy.total_keywords == 5

    def test_missing_groups_default_to_empty(self) -> None:
        taxonomy = normalize_taxonomy('{"primary_keywords": ["a keyword"]}')
        assert taxonomy.related_keywords == []
        assert taxonomy.long_tail_keywords == []

    def test_blank_and_duplicate_keywords_are_dropped(self) -> None:
        taxonomy = normalize_taxonomy('{"primary_keywords": ["solar", " ", "solar", 7, null]}')
        assert taxonomy.primary_keywords == ["solar"]

    def test_non_object_intent_is_ignored(self) -> None:
        taxonomy = normalize_taxonomy('{"primary_keywords": ["x"], "keyword_intent": ["y"]}')
        assert taxonomy.keyword_intent.informational == []

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(EnrichmentError, match="not valid JSON"):
            normalize_taxonomy("Sorry, I cannot help with that.")

    def test_non_object_raises(self) -> None:
        with pytest.raises(EnrichmentError):
            normalize_taxonomy('["solar"]')

    def test_empty_taxonomy_raises(self) -> None:
        with pytest.raises(EnrichmentError, match="no keywords"):
            normalize_taxonomy('{"primary_keywords": []}')


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------

class TestFallbackTaxonomy:
    def test_union_in_page_then_rank_order(self) -> None:
        taxonomy = fallback_taxonomy(_PAGES)
        assert taxonomy.primary_keywords == ["solar", "battery", "energy", "inverter"]
        assert taxonomy.secondary_keywords == []
        assert taxonomy.keyword_intent.informational == []

    def test_failed_pages_are_skipped(self) -> None:
        pages = [_page("https://site.test/x", ["ignored"], error="Scrape failed: x..."), *_PAGES]
        assert "ignored" not in fallback_taxonomy(pages).primary_keywords

    def test_capped_at_ten(self) -> None:
        pages = [_page(f"https://site.test/{i}", [f"word{i}a", f"word{i}b"]) for i in range(8)]
        assert len(fallback_taxonomy(pages).primary_keywords) == 10

    def test_no_pages(self) -> None:
        assert fallback_taxonomy([]).is_empty()


def test_payload_shape() -> None:
    payload = build_payload(_PAGES)
    assert payload["analysisType"] == ANALYSIS_TYPE_TAG
    assert payload["totalPages"] == 2
    assert payload["data"][0]["url"] == "https://site.test/"
    assert payload["data"][0]["keywords"][0] == {"word": "solar", "count": 3}
    assert payload["timestamp"]


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class TestEnrichmentClient:
    @respx.mock
    def test_success_returns_enriched(self) -> None:
        route = respx.post(WEBHOOK).mock(
            return_value=httpx.Response(
                200, json=[{"output": "```json\n" + json.dumps(_TAXONOMY) + "\n```"}]
            )
        )

        result = EnrichmentClient(WEBHOOK).enrich(_PAGES)

        assert route.called
        sent = json.loads(route.calls.last.request.content)
        assert sent["totalPages"] == 2
        assert result.analysis_type == "enriched"
        assert not result.fallback
        assert result.error is None
        assert result.taxonomy.primary_keywords == ["solar panels", "home batteries"]

    @respx.mock
    def test_timeout_falls_back(self) -> None:
        respx.post(WEBHOOK).mock(side_effect=httpx.ReadTimeout("timed out"))

        result = EnrichmentClient(WEBHOOK, timeout=0.1).enrich(_PAGES)

        assert result.fallback
        assert result.error == FALLBACK_MESSAGE
        assert result.taxonomy.primary_keywords == ["solar", "battery", "energy", "inverter"]

    @respx.mock
    def test_server_error_falls_back(self) -> None:
        respx.post(WEBHOOK).mock(return_value=httpx.Response(500, text="boom"))
        assert EnrichmentClient(WEBHOOK).enrich(_PAGES).fallback

    @respx.mock
    def test_non_json_body_falls_back(self) -> None:
        respx.post(WEBHOOK).mock(return_value=httpx.Response(200, text="<html>oops</html>"))
        assert EnrichmentClient(WEBHOOK).enrich(_PAGES).fallback

    @respx.mock
    def test_unusable_output_falls_back(self) -> None:
        respx.post(WEBHOOK).mock(
            return_value=httpx.Response(200, json={"output": "I could not analyse that."})
        )
        result = EnrichmentClient(WEBHOOK).enrich(_PAGES)
        assert result.fallback
        assert result.taxonomy.primary_keywords

    def test_no_webhook_configured_falls_back_without_request(self) -> None:
        with respx.mock(assert_all_called=False) as mock:
            result = EnrichmentClient("").enrich(_PAGES)
            assert not mock.calls
        assert result.fallback

    def test_malformed_webhook_url_falls_back(self) -> None:
        client = EnrichmentClient("http://a\x00b/hook")

        with pytest.raises(EnrichmentError, match="request failed"):
            client.analyse(_PAGES)
        result = client.enrich(_PAGES)
        assert result.fallback
        assert result.error == FALLBACK_MESSAGE

    def test_analyse_raises_instead_of_falling_back(self) -> None:
        with pytest.raises(EnrichmentError, match="No analysis backend"):
            EnrichmentClient("").analyse(_PAGES)

    def test_round_trip_through_dict(self) -> None:
        taxonomy = normalize_taxonomy(json.dumps(_TAXONOMY))
        assert KeywordTaxonomy.from_dict(taxonomy.to_dict()) == taxonomy
