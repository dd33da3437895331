"""Pure aggregation of per-source analyses."""

from __future__ import annotations

from typing import Iterable

from deepsearch.pipeline.models import AnalyzedSource, ConsolidatedSynthesis, RankedItem, SourceDigest

HIGH_RELEVANCE = 70
MEDIUM_RELEVANCE = 40
TOP_ITEMS = 10


def top_items(per_source: Iterable[list[str]], limit: int = TOP_ITEMS) -> list[RankedItem]:
    """
    Rank strings by the number of sources that mention them.

    A string repeated within one source counts once. Ties keep first-seen order.
    """
    counts: dict[str, int] = {}
    for items in per_source:
        for item in dict.fromkeys(items):
            counts[item] = counts.get(item, 0) + 1

    ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return [RankedItem(item=item, count=count) for item, count in ranked[:limit]]


def consolidate(query: str, analyses: list[AnalyzedSource]) -> ConsolidatedSynthesis:
    """Aggregate analyses into relevance buckets and ranked findings."""
    scores = [entry.analysis.relevance_score for entry in analyses]
    return ConsolidatedSynthesis(
        query=query,
        total_sources=len(analyses),
        high_relevance_sources=sum(1 for s in scores if s >= HIGH_RELEVANCE),
        medium_relevance_sources=sum(1 for s in scores if MEDIUM_RELEVANCE <= s < HIGH_RELEVANCE),
        low_relevance_sources=sum(1 for s in scores if s < MEDIUM_RELEVANCE),
        top_key_points=top_items(entry.analysis.key_points for entry in analyses),
        top_insights=top_items(entry.analysis.insights for entry in analyses),
        top_topics=top_items(entry.analysis.topics for entry in analyses),
        sources=[
            SourceDigest(
                url=entry.source.url,
                domain=entry.source.domain,
                title=entry.source.title,
                relevance=entry.analysis.relevance_score,
                credibility=entry.analysis.credibility_score,
                summary=entry.analysis.summary,
            )
            for entry in analyses
        ],
    )
