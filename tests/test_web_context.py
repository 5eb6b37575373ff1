"""
Test Web Context Fetcher
========================

Every failure path must degrade to an empty result list.
"""
import json

import httpx
import pytest

from core.schemas import WebSearchResult
from providers.firecrawl import WebContextFetcher, format_context


def make_fetcher(handler, api_key="fc-test"):
    return WebContextFetcher(api_key=api_key, transport=httpx.MockTransport(handler))


def test_search_sends_bounded_query():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": []})

    make_fetcher(handler).search("employee records")

    assert seen["url"] == "https://api.firecrawl.dev/v1/search"
    assert seen["auth"] == "Bearer fc-test"
    assert seen["body"] == {
        "query": "employee records sample data examples",
        "limit": 5,
        "scrapeOptions": {"formats": ["markdown"]},
    }


def test_results_are_truncated_and_defaulted():
    items = [
        {"title": "Salaries", "url": "https://a.test", "markdown": "x" * 2000},
        {"url": "https://b.test"},
    ]
    fetcher = make_fetcher(lambda request: httpx.Response(200, json={"data": items}))

    results = fetcher.search("salaries")

    assert len(results) == 2
    assert results[0].title == "Salaries"
    assert len(results[0].content) == 800
    assert results[1] == WebSearchResult(title="", url="https://b.test", content="")


def test_missing_key_returns_empty_without_calling():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"data": [{"title": "t"}]})

    assert make_fetcher(handler, api_key=None).search("x") == []
    assert calls == []


def test_non_success_status_returns_empty():
    fetcher = make_fetcher(lambda request: httpx.Response(500, json={"error": "boom"}))
    assert fetcher.search("x") == []


def test_transport_error_returns_empty():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    assert make_fetcher(handler).search("x") == []


def test_unreadable_body_returns_empty():
    fetcher = make_fetcher(lambda request: httpx.Response(200, content=b"<html>"))
    assert fetcher.search("x") == []


@pytest.mark.parametrize("body", [
    {"data": {"title": "not a list"}},
    {"data": "oops"},
    [1, 2, 3],
])
def test_unexpected_data_shape_returns_empty(body):
    fetcher = make_fetcher(lambda request: httpx.Response(200, json=body))
    assert fetcher.search("x") == []


def test_non_string_fields_are_coerced():
    items = [
        {"title": 42, "url": ["https://a.test"], "markdown": 12345},
        "not an item",
        {"title": None, "markdown": None},
    ]
    fetcher = make_fetcher(lambda request: httpx.Response(200, json={"data": items}))

    results = fetcher.search("x")

    assert [(r.title, r.content) for r in results] == [("42", "12345"), ("", "")]


def test_format_context_joins_sources_and_truncates():
    results = [
        WebSearchResult(title="A", content="alpha"),
        WebSearchResult(title="B", content="beta"),
    ]
    assert format_context(results) == "Source: A\nalpha\n\nSource: B\nbeta"

    long_results = [WebSearchResult(title=str(i), content="y" * 800) for i in range(5)]
    assert len(format_context(long_results)) == 3000
    assert format_context([]) == ""
