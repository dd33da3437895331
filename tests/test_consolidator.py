"""Tests for analysis consolidation."""

from deepsearch.analysis.schemas import SourceAnalysis
from deepsearch.pipeline.consolidator import consolidate, top_items
from deepsearch.pipeline.models import AnalyzedSource
from tests.mocks import make_source


def analyzed(url, relevance, key_points=(), insights=(), topics=()):
    return AnalyzedSource(
        source=make_source(url),
        analysis=SourceAnalysis(
            relevance_score=relevance,
            credibility_score=50,
            summary=f"summary of {url}",
            key_points=list(key_points),
            insights=list(insights),
            topics=list(topics),
        ),
    )


def test_top_items_counts_once_per_source():
    ranked = top_items([["a", "a", "b"], ["b"], ["c", "b"]])

    assert [(r.item, r.count) for r in ranked] == [("b", 3), ("a", 1), ("c", 1)]


def test_top_items_limit():
    ranked = top_items([[str(i) for i in range(15)]], limit=10)

    assert len(ranked) == 10
    assert ranked[0].item == "0"


def test_consolidate_relevance_buckets():
    analyses = [
        analyzed("https://a.com", 90, key_points=["shared"], topics=["ai"]),
        analyzed("https://b.com", 70, key_points=["shared", "other"], topics=["ai", "ml"]),
        analyzed("https://c.com", 69, insights=["trend"]),
        analyzed("https://d.com", 40),
        analyzed("https://e.com", 39),
    ]

    result = consolidate("query", analyses)

    assert result.total_sources == 5
    assert result.high_relevance_sources == 2
    assert result.medium_relevance_sources == 2
    assert result.low_relevance_sources == 1
    assert result.top_key_points[0].item == "shared"
    assert result.top_key_points[0].count == 2
    assert [t.item for t in result.top_topics] == ["ai", "ml"]
    assert result.top_insights[0].item == "trend"
    assert [s.url for s in result.sources] == [a.source.url for a in analyses]
    assert result.sources[0].relevance == 90


def test_consolidate_empty():
    result = consolidate("query", [])

    assert result.total_sources == 0
    assert result.top_key_points == []
    assert result.sources == []
