"""Retrieval phase: term expansion, searching, filtering and scraping."""

from __future__ import annotations

import asyncio
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol

import structlog

from deepsearch.config.settings import DEFAULT_DORK_TEMPLATES, Settings
from deepsearch.search.base import SearchProvider
from deepsearch.search.models import (
    DomainCount,
    RetrievalResult,
    ScrapedSource,
    SearchHit,
    SearchStats,
    SearchTermsExpansion,
)
from deepsearch.search.throttle import RequestThrottle
from deepsearch.search.urls import DomainFilter, canonical_url

if TYPE_CHECKING:
    from deepsearch.analysis.service import AnalysisService

logger = structlog.get_logger(__name__)


class PageFetcher(Protocol):
    async def fetch(self, target: SearchHit | str) -> Optional[ScrapedSource]: ...


@dataclass
class RetrievalConfig:
    """Retrieval coordinator options."""

    max_results: int = 50
    max_concurrent_scrapes: int = 5
    dork_templates: list[str] = field(default_factory=lambda: list(DEFAULT_DORK_TEMPLATES))
    top_domains: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetrievalConfig":
        return cls(
            max_results=settings.max_search_results,
            max_concurrent_scrapes=settings.max_concurrent_scrapes,
            dork_templates=list(settings.dork_templates),
        )


def split_budget(budget: int, parts: int) -> int:
    """Per-call result budget when ``budget`` is shared by ``parts`` calls."""
    if parts <= 0:
        return 0
    return math.ceil(budget / parts)


class RetrievalCoordinator:
    """Turns a query into scraped web sources."""

    def __init__(
        self,
        provider: SearchProvider,
        fetcher: PageFetcher,
        analysis: Optional["AnalysisService"] = None,
        config: RetrievalConfig | None = None,
        domain_filter: DomainFilter | None = None,
        throttle: RequestThrottle | None = None,
    ):
        """
        Initialize the coordinator.

        Args:
            provider: Search engine used for every query
            fetcher: Page fetcher used for scraping
            analysis: Model service used to expand the query into search terms
            config: Coordinator options
            domain_filter: Allowed/blocked domain policy
            throttle: Delays between outbound calls
        """
        self.provider = provider
        self.fetcher = fetcher
        self.analysis = analysis
        self.config = config or RetrievalConfig()
        self.domain_filter = domain_filter or DomainFilter()
        self.throttle = throttle or RequestThrottle()

    async def generate_search_terms(self, query: str) -> SearchTermsExpansion:
        """
        Expand a query into search terms.

        Never raises: any failure yields the single-term expansion.
        """
        if self.analysis is None:
            return SearchTermsExpansion.single(query)

        try:
            expansion = await self.analysis.expand_terms(query)
        except Exception as e:
            logger.warning("Search term expansion failed, using query as the only term", error=str(e))
            return SearchTermsExpansion.single(query)

        logger.info("Search terms generated", count=len(expansion.search_terms), categories=expansion.categories)
        return expansion

    def build_dorks(self, term: str) -> list[str]:
        return [template.replace("{term}", term) for template in self.config.dork_templates]

    async def search_with_dorks(
        self,
        term: str,
        results_per_variant: int,
        seen: set[str] | None = None,
    ) -> list[SearchHit]:
        """
        Run every dork variant of ``term``.

        Args:
            term: Base search term
            results_per_variant: Result budget of each variant
            seen: Canonical URLs already collected in this retrieval

        Returns:
            New hits tagged with their term and dork, first-seen order
        """
        seen = seen if seen is not None else set()
        collected: list[SearchHit] = []

        for index, dork in enumerate(self.build_dorks(term)):
            if index:
                await self.throttle.wait("dork")
            hits = await self._search_once(dork, results_per_variant)
            self._collect(hits, term, dork, seen, collected)

        logger.info("Dork search completed", term=term, results_count=len(collected))
        return collected

    async def multi_search(
        self,
        terms: list[str],
        results_per_term: int,
        seen: set[str] | None = None,
    ) -> list[SearchHit]:
        """
        Search each term in turn.

        Args:
            terms: Search terms
            results_per_term: Result budget of each term
            seen: Canonical URLs already collected in this retrieval

        Returns:
            New hits tagged with their term, first-seen order
        """
        seen = seen if seen is not None else set()
        collected: list[SearchHit] = []

        for index, term in enumerate(terms):
            if index:
                await self.throttle.wait("term")
            hits = await self._search_once(term, results_per_term)
            self._collect(hits, term, None, seen, collected)

        logger.info("Multi-term search completed", terms_count=len(terms), results_count=len(collected))
        return collected

    async def _search_once(self, query: str, max_results: int) -> list[SearchHit]:
        try:
            return await self.provider.search(query, max_results=max_results)
        except Exception as e:
            logger.error("Search provider call failed", error=str(e), query=query)
            return []

    @staticmethod
    def _collect(
        hits: list[SearchHit],
        term: str,
        dork: str | None,
        seen: set[str],
        collected: list[SearchHit],
    ) -> None:
        for hit in hits:
            key = canonical_url(hit.url)
            if key in seen:
                continue
            seen.add(key)
            collected.append(hit.model_copy(update={"search_term": term, "dork": dork}))

    def filter_hits(self, hits: list[SearchHit]) -> list[SearchHit]:
        """Drop hits whose domain is blocked or not allowed."""
        kept = [hit for hit in hits if self.domain_filter.is_allowed(hit.url)]
        if len(kept) != len(hits):
            logger.info("Hits removed by domain policy", removed=len(hits) - len(kept))
        return kept

    async def scrape_content(self, hits: list[SearchHit]) -> list[ScrapedSource]:
        """
        Fetch hits in concurrent chunks.

        A failing fetch only loses its own page.
        """
        chunk_size = max(1, self.config.max_concurrent_scrapes)
        sources: list[ScrapedSource] = []

        for start in range(0, len(hits), chunk_size):
            if start:
                await self.throttle.wait("chunk")
            chunk = hits[start : start + chunk_size]
            results = await asyncio.gather(
                *(self.fetcher.fetch(hit) for hit in chunk), return_exceptions=True
            )
            for hit, result in zip(chunk, results):
                if isinstance(result, Exception):
                    logger.warning("Scrape failed", error=str(result), url=hit.url)
                elif result is not None:
                    sources.append(result)

        logger.info("Scraping completed", requested=len(hits), scraped=len(sources))
        return sources

    def compute_stats(self, sources: list[ScrapedSource]) -> SearchStats:
        """Aggregate domain and size statistics for scraped sources."""
        domains = Counter(source.domain for source in sources)
        total_length = sum(source.content_length for source in sources)
        return SearchStats(
            total_results=len(sources),
            domains=dict(domains),
            top_domains=[
                DomainCount(domain=domain, count=count)
                for domain, count in domains.most_common(self.config.top_domains)
            ],
            average_content_length=round(total_length / len(sources)) if sources else 0,
            total_content_length=total_length,
            total_words=sum(source.word_count for source in sources),
        )

    async def collect_hits(
        self,
        search_terms: list[str],
        max_results: int,
        use_advanced_search: bool = True,
    ) -> list[SearchHit]:
        """Run the provider calls for a retrieval and return deduplicated hits."""
        seen: set[str] = set()

        if not use_advanced_search:
            return await self.multi_search(search_terms, max_results, seen)

        half = math.ceil(max_results / 2)
        primary, remaining = search_terms[0], search_terms[1:]

        hits = await self.search_with_dorks(
            primary, split_budget(half, len(self.config.dork_templates)), seen
        )
        if remaining:
            await self.throttle.wait("term")
            hits += await self.multi_search(remaining, split_budget(half, len(remaining)), seen)
        return hits

    async def retrieve(
        self,
        query: str,
        max_results: int | None = None,
        use_advanced_search: bool = True,
        expansion: SearchTermsExpansion | None = None,
    ) -> RetrievalResult:
        """
        Run the whole retrieval phase.

        Args:
            query: Natural-language query
            max_results: Result budget, defaults to the configured one
            use_advanced_search: Run dork variants on the first term
            expansion: Precomputed search terms; generated when omitted

        Returns:
            Search terms, scraped sources and statistics
        """
        budget = max_results if max_results is not None else self.config.max_results
        if expansion is None:
            expansion = await self.generate_search_terms(query)

        logger.info(
            "Starting web search",
            terms_count=len(expansion.search_terms),
            max_results=budget,
            advanced=use_advanced_search,
        )

        hits = await self.collect_hits(expansion.search_terms, budget, use_advanced_search)
        hits = self.filter_hits(hits)
        sources = await self.scrape_content(hits)

        return RetrievalResult(
            search_terms=expansion.search_terms,
            sources=sources,
            stats=self.compute_stats(sources),
        )
