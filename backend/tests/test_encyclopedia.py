"""
Tests for the Wikipedia client.

Requests are served by httpx.MockTransport, so no network is needed.
Run with: pytest backend/tests/test_encyclopedia.py -v
"""

import httpx
import pytest

from claimcheck.models.schemas import Claim, Verdict
from claimcheck.services.sources.encyclopedia import EncyclopediaClient, normalize_title
from claimcheck.services.trust.claim_verifier import ClaimVerifier
from claimcheck.services.trust.entity_extractor import EntityExtractor
from claimcheck.services.trust.semantic_matcher import SemanticMatcher

from conftest import FakeWebSearch

SUMMARY_PREFIX = "/api/rest_v1/page/summary/"
SEARCH_PATH = "/w/api.php"


def make_client(settings, handler):
    transport = httpx.MockTransport(handler)
    return EncyclopediaClient(settings, http_client=httpx.AsyncClient(transport=transport))


def summary_payload(title, extract, url=None):
    payload = {"title": title, "extract": extract}
    if url:
        payload["content_urls"] = {"desktop": {"page": url}}
    return payload


def test_normalize_title():
    assert normalize_title("Eiffel Tower") == "Eiffel_Tower"
    assert normalize_title('  "Albert Einstein" ') == "Albert_Einstein"
    assert normalize_title("“Marie Curie”") == "Marie_Curie"


@pytest.mark.asyncio
async def test_direct_hit_returns_summary(settings):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=summary_payload(
            "Eiffel Tower",
            "The Eiffel Tower is a wrought-iron lattice tower in Paris.",
            "https://en.wikipedia.org/wiki/Eiffel_Tower",
        ))

    client = make_client(settings, handler)
    summary = await client.lookup_summary("Eiffel Tower")
    await client.close()

    assert summary.title == "Eiffel Tower"
    assert summary.url == "https://en.wikipedia.org/wiki/Eiffel_Tower"
    assert summary.extract.startswith("The Eiffel Tower")
    assert len(requests) == 1
    assert requests[0].url.path == SUMMARY_PREFIX + "Eiffel_Tower"
    assert requests[0].headers["User-Agent"] == settings.user_agent


@pytest.mark.asyncio
async def test_missing_page_url_is_constructed(settings):
    def handler(request):
        return httpx.Response(200, json={"extract": "A city in Germany."})

    client = make_client(settings, handler)
    summary = await client.lookup_summary("Ulm")

    assert summary.url == "https://en.wikipedia.org/wiki/Ulm"
    assert summary.title == "Ulm"


@pytest.mark.asyncio
async def test_not_found_falls_back_to_search(settings):
    requested_paths = []

    def handler(request):
        requested_paths.append(request.url.path)
        if request.url.path == SEARCH_PATH:
            assert request.url.params["srsearch"] == "Einstein"
            assert request.url.params["list"] == "search"
            return httpx.Response(200, json={"query": {"search": [
                {"title": "Albert Einstein"},
                {"title": "Einstein family"},
            ]}})
        if request.url.path == SUMMARY_PREFIX + "Albert_Einstein":
            return httpx.Response(200, json=summary_payload(
                "Albert Einstein", "Albert Einstein was a theoretical physicist.",
            ))
        return httpx.Response(404, json={"title": "Not found."})

    client = make_client(settings, handler)
    summary = await client.lookup_summary("Einstein")

    assert summary.title == "Albert Einstein"
    assert requested_paths == [
        SUMMARY_PREFIX + "Einstein",
        SEARCH_PATH,
        SUMMARY_PREFIX + "Albert_Einstein",
    ]


@pytest.mark.asyncio
async def test_empty_extract_counts_as_failure(settings):
    def handler(request):
        if request.url.path == SEARCH_PATH:
            return httpx.Response(200, json={"query": {"search": []}})
        return httpx.Response(200, json={"title": "Disambiguation", "extract": "   "})

    client = make_client(settings, handler)

    assert await client.lookup_summary("Mercury") is None


@pytest.mark.asyncio
async def test_both_steps_failing_returns_none(settings):
    def handler(request):
        return httpx.Response(500, text="upstream error")

    client = make_client(settings, handler)

    assert await client.lookup_summary("Atlantis") is None


@pytest.mark.asyncio
async def test_connection_errors_are_absorbed(settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(settings, handler)

    assert await client.lookup_summary("Eiffel Tower") is None


@pytest.mark.asyncio
async def test_non_json_body_is_absorbed(settings):
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    client = make_client(settings, handler)

    assert await client.lookup_summary("Eiffel Tower") is None


@pytest.mark.asyncio
async def test_empty_entity_sends_no_request(settings):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={})

    client = make_client(settings, handler)

    assert await client.lookup_summary('  ""  ') is None
    assert requests == []


# =============================================================================
# UNEXPECTED RESPONSE SHAPES
# =============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    ["not", "an", "object"],
    "just a string",
    {"extract": ["a", "list"]},
    {"extract": None},
])
async def test_summary_with_wrong_shape_is_a_failed_step(settings, body):
    def handler(request):
        if request.url.path == SEARCH_PATH:
            return httpx.Response(200, json={"query": {"search": []}})
        return httpx.Response(200, json=body)

    client = make_client(settings, handler)

    assert await client.lookup_summary("Eiffel Tower") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("content_urls", [
    {"desktop": None},
    {"desktop": "https://example.com"},
    ["https://example.com"],
    {"desktop": {"page": 42}},
])
async def test_malformed_page_url_falls_back_to_constructed_url(settings, content_urls):
    def handler(request):
        return httpx.Response(200, json={
            "title": "Eiffel Tower",
            "extract": "A tower in Paris.",
            "content_urls": content_urls,
        })

    client = make_client(settings, handler)
    summary = await client.lookup_summary("Eiffel Tower")

    assert summary.url == "https://en.wikipedia.org/wiki/Eiffel_Tower"
    assert summary.title == "Eiffel Tower"


@pytest.mark.asyncio
async def test_non_string_title_uses_requested_title(settings):
    def handler(request):
        return httpx.Response(200, json={"title": {"text": "x"}, "extract": "A city."})

    client = make_client(settings, handler)
    summary = await client.lookup_summary("New York")

    assert summary.title == "New York"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    ["query"],
    {"query": ["search"]},
    {"query": {"search": {"title": "Albert Einstein"}}},
    {"query": {"search": ["Albert Einstein", None, {"title": 7}]}},
])
async def test_search_with_wrong_shape_returns_no_titles(settings, body):
    def handler(request):
        if request.url.path == SEARCH_PATH:
            return httpx.Response(200, json=body)
        return httpx.Response(404)

    client = make_client(settings, handler)

    assert await client.search_titles("Einstein") == []
    assert await client.lookup_summary("Einstein") is None


@pytest.mark.asyncio
async def test_search_skips_malformed_items_but_keeps_valid_ones(settings):
    def handler(request):
        return httpx.Response(200, json={"query": {"search": [
            "stray string",
            {"title": "Albert Einstein"},
        ]}})

    client = make_client(settings, handler)

    assert await client.search_titles("Einstein") == ["Albert Einstein"]


@pytest.mark.asyncio
async def test_verifier_survives_a_malformed_summary(settings, disabled_llm):
    def handler(request):
        return httpx.Response(200, json=["not", "an", "object"])

    verifier = ClaimVerifier(
        settings,
        entity_extractor=EntityExtractor(settings, llm=disabled_llm),
        encyclopedia=make_client(settings, handler),
        web_search=FakeWebSearch(enabled=False),
        matcher=SemanticMatcher(settings, llm=disabled_llm),
    )

    result = await verifier.verify(Claim(id="c1", text="The Eiffel Tower is in Paris"))

    assert result.verdict == Verdict.UNCERTAIN
    assert result.confidence == 40
