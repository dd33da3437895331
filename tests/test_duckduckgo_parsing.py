"""Tests for DuckDuckGo result page parsing."""

import pytest

from deepsearch.search.duckduckgo_provider import DuckDuckGoSearchProvider, parse_results

RESULTS_PAGE = """
<html><body>
<div class="result results_links result--ad">
  <h2 class="result__title"><a class="result__a" href="https://duckduckgo.com/y.js?ad=1">Sponsored</a></h2>
</div>
<div class="result results_links">
  <h2 class="result__title">
    <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2Fone&amp;rut=x">First result</a>
  </h2>
  <a class="result__snippet">First snippet text</a>
</div>
<div class="result results_links">
  <h2 class="result__title">
    <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fduckduckgo.com%2Fy.js%3Fad%3D2">Hidden ad</a>
  </h2>
</div>
<div class="result results_links">
  <h2 class="result__title"><a class="result__a" href="https://example.org/two">Second result</a></h2>
</div>
<div class="result results_links">
  <h2 class="result__title">No link here</h2>
</div>
</body></html>
"""


def test_parse_results_skips_ads_and_unwraps_links():
    hits = parse_results(RESULTS_PAGE)

    assert [hit.url for hit in hits] == ["https://example.com/one", "https://example.org/two"]
    assert hits[0].title == "First result"
    assert hits[0].snippet == "First snippet text"
    assert hits[1].snippet == ""
    assert all(hit.source == "duckduckgo" for hit in hits)


def test_parse_results_empty_page():
    assert parse_results("<html><body>No results.</body></html>") == []


@pytest.mark.asyncio
async def test_search_with_zero_budget_makes_no_request():
    provider = DuckDuckGoSearchProvider()

    assert await provider.search("python", max_results=0) == []


def test_safe_search_levels():
    provider = DuckDuckGoSearchProvider()

    assert provider._build_params("q", None, "strict")["kp"] == "1"
    assert provider._build_params("q", None, "off")["kp"] == "-2"
    assert provider._build_params("q", "us-en", None) == {"q": "q", "kl": "us-en", "kp": "-1"}
