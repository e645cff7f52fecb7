"""
Tests for the web search client.

Run with: pytest backend/tests/test_web_search.py -v
"""

import json

import httpx
import pytest

from claimcheck.config import Settings
from claimcheck.services.sources.web_search import WebSearchClient


@pytest.fixture
def search_settings():
    return Settings(_env_file=None, openai_api_key="", search_api_key="test-key")


def make_client(settings, handler):
    transport = httpx.MockTransport(handler)
    return WebSearchClient(settings, http_client=httpx.AsyncClient(transport=transport))


@pytest.mark.asyncio
async def test_disabled_without_key_sends_no_request(settings):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={})

    client = make_client(settings, handler)

    assert client.enabled is False
    assert await client.search("Einstein Nobel Prize") == []
    assert requests == []


@pytest.mark.asyncio
async def test_search_returns_at_most_five_results(search_settings):
    captured = {}

    def handler(request):
        captured["headers"] = request.headers
        captured["body"] = json.loads(request.content)
        organic = [
            {"title": f"Result {i}", "snippet": f"Snippet {i}", "link": f"https://example.com/{i}"}
            for i in range(8)
        ]
        return httpx.Response(200, json={"organic": organic})

    client = make_client(search_settings, handler)
    results = await client.search("Einstein won the Nobel Prize in 1921")
    await client.close()

    assert client.enabled is True
    assert len(results) == 5
    assert results[0].title == "Result 0"
    assert results[0].snippet == "Snippet 0"
    assert results[0].url == "https://example.com/0"
    assert captured["headers"]["X-API-KEY"] == "test-key"
    assert captured["body"]["q"] == "Einstein won the Nobel Prize in 1921"


@pytest.mark.asyncio
async def test_results_without_link_are_skipped(search_settings):
    def handler(request):
        return httpx.Response(200, json={"organic": [
            {"title": "No link"},
            {"title": "Kept", "link": "https://example.com/kept"},
        ]})

    client = make_client(search_settings, handler)
    results = await client.search("query")

    assert [r.title for r in results] == ["Kept"]
    assert results[0].snippet == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(500, text="boom"),
    httpx.Response(200, text="not json"),
    httpx.Response(200, json={"answerBox": {}}),
])
async def test_failures_return_empty_list(search_settings, response):
    client = make_client(search_settings, lambda request: response)

    assert await client.search("query") == []


@pytest.mark.asyncio
async def test_timeout_returns_empty_list(search_settings):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(search_settings, handler)

    assert await client.search("query") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    ["organic"],
    {"organic": {"title": "x"}},
    {"organic": "not a list"},
    {"organic": ["first hit", "second hit"]},
    {"organic": [{"title": 5, "link": "https://example.com"}, {"title": "t", "link": None}]},
])
async def test_wrong_shape_returns_empty_list(search_settings, body):
    client = make_client(search_settings, lambda request: httpx.Response(200, json=body))

    assert await client.search("query") == []


@pytest.mark.asyncio
async def test_malformed_items_are_skipped_and_bad_snippets_blanked(search_settings):
    def handler(request):
        return httpx.Response(200, json={"organic": [
            "stray string",
            None,
            {"title": "Kept", "link": "https://example.com/kept", "snippet": ["not", "text"]},
        ]})

    client = make_client(search_settings, handler)
    results = await client.search("query")

    assert len(results) == 1
    assert results[0].title == "Kept"
    assert results[0].snippet == ""
