"""Tests for the deep search run orchestration."""

import pytest

from deepsearch.database.models import VectorMatch
from deepsearch.embeddings.cache import EmbeddingCache, InMemoryEmbeddingStore
from deepsearch.embeddings.mock_provider import MockEmbeddingProvider
from deepsearch.errors import (
    AnalysisServiceError,
    InvalidQueryError,
    ReportGenerationError,
    StoreNotConfiguredError,
    WebSearchError,
)
from deepsearch.pipeline.analyzer import SourceAnalyzer
from deepsearch.pipeline.models import DeepSearchOptions
from deepsearch.pipeline.orchestrator import DeepSearchOrchestrator
from deepsearch.pipeline.report import ReportSynthesizer
from deepsearch.search.coordinator import RetrievalConfig, RetrievalCoordinator
from deepsearch.search.models import SearchTermsExpansion
from deepsearch.search.throttle import RequestThrottle
from tests.mocks import InMemorySessionStore, MockFetcher, MockSearchProvider, ScriptedAnalysisService


def build_orchestrator(analysis=None, store=None, provider=None):
    analysis = analysis or ScriptedAnalysisService()
    throttle = RequestThrottle.disabled()
    coordinator = RetrievalCoordinator(
        provider=provider or MockSearchProvider(),
        fetcher=MockFetcher(),
        analysis=analysis,
        config=RetrievalConfig(max_results=6),
        throttle=throttle,
    )
    analyzer = SourceAnalyzer(
        analysis=analysis,
        embedding_cache=EmbeddingCache(InMemoryEmbeddingStore(), MockEmbeddingProvider(dimension=4)),
        store=store,
        throttle=throttle,
    )
    synthesizer = ReportSynthesizer(analysis=analysis, store=store)
    return DeepSearchOrchestrator(coordinator, analyzer, synthesizer, analysis, store=store)


@pytest.mark.asyncio
async def test_full_run_persists_completed_session():
    store = InMemorySessionStore()
    analysis = ScriptedAnalysisService(
        expansion=SearchTermsExpansion(original_query="rust", search_terms=["rust", "rust language"], categories=["tech"])
    )
    orchestrator = build_orchestrator(analysis=analysis, store=store)

    result = await orchestrator.perform_deep_search("rust", DeepSearchOptions(max_sources=4))

    assert result.search_terms == ["rust", "rust language"]
    assert result.categories == ["tech"]
    assert result.analysis.successful_analyses == len(result.web_results.sources) > 0
    assert result.report.content.startswith("# Report")
    session = store.session(result.session_id)
    assert session.status == "completed"
    assert session.metadata["search_terms"] == ["rust", "rust language"]
    assert session.metadata["report_generated"] is True
    assert session.metadata["options"]["max_sources"] == 4
    assert len(store.sources) == result.analysis.successful_analyses
    assert len(store.reports) == 1


@pytest.mark.asyncio
async def test_expansion_failure_still_completes():
    store = InMemorySessionStore()
    analysis = ScriptedAnalysisService(expansion=AnalysisServiceError("expand_terms", "timed out after 120s"))
    orchestrator = build_orchestrator(analysis=analysis, store=store)

    result = await orchestrator.perform_deep_search("solar energy", DeepSearchOptions(use_advanced_search=False))

    assert result.search_terms == ["solar energy"]
    assert result.categories == ["general"]
    assert store.session(result.session_id).status == "completed"


@pytest.mark.asyncio
async def test_report_failure_marks_session_error():
    store = InMemorySessionStore()
    analysis = ScriptedAnalysisService(report=AnalysisServiceError("synthesize_report", "model unavailable"))
    orchestrator = build_orchestrator(analysis=analysis, store=store)

    with pytest.raises(ReportGenerationError):
        await orchestrator.perform_deep_search("rust")

    (session_id,) = store.sessions
    session = store.session(session_id)
    assert session.status == "error"
    assert "model unavailable" in session.metadata["error"]
    assert session.metadata["failed_stage"] == "reported"
    assert session.metadata["last_stage"] == "analyzed"
    assert "error_time" in session.metadata


@pytest.mark.asyncio
async def test_web_search_failure_marks_session_error():
    store = InMemorySessionStore()
    orchestrator = build_orchestrator(store=store)

    async def scrape_pool_down(hits):
        raise RuntimeError("scrape pool exploded")

    orchestrator.coordinator.scrape_content = scrape_pool_down

    with pytest.raises(WebSearchError, match="scrape pool exploded"):
        await orchestrator.perform_deep_search("rust")

    (session_id,) = store.sessions
    session = store.session(session_id)
    assert session.status == "error"
    assert "scrape pool exploded" in session.metadata["error"]
    assert session.metadata["failed_stage"] == "web_searched"
    assert session.metadata["last_stage"] == "terms_generated"
    assert store.reports == []


@pytest.mark.asyncio
async def test_no_successful_analysis_still_reports():
    def always_fail(query, content):
        raise AnalysisServiceError("analyze_content", "bad gateway")

    analysis = ScriptedAnalysisService(analyze=always_fail)
    orchestrator = build_orchestrator(analysis=analysis)

    result = await orchestrator.perform_deep_search("rust")

    assert result.analysis.successful_analyses == 0
    assert result.analysis.consolidated.total_sources == 0
    assert result.session_id is None
    assert analysis.report_calls[0]["total_sources"] == 0


@pytest.mark.asyncio
async def test_save_to_database_disabled():
    store = InMemorySessionStore()
    orchestrator = build_orchestrator(store=store)

    result = await orchestrator.perform_deep_search("rust", DeepSearchOptions(save_to_database=False))

    assert result.session_id is None
    assert store.sessions == {}
    assert store.sources == []


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", None, 42])
async def test_invalid_query_rejected(query):
    store = InMemorySessionStore()
    orchestrator = build_orchestrator(store=store)

    with pytest.raises(InvalidQueryError):
        await orchestrator.perform_deep_search(query)

    assert store.sessions == {}


@pytest.mark.asyncio
async def test_store_operations_require_store():
    orchestrator = build_orchestrator()

    with pytest.raises(StoreNotConfiguredError):
        await orchestrator.get_search_history()
    with pytest.raises(StoreNotConfiguredError):
        await orchestrator.get_statistics()
    with pytest.raises(StoreNotConfiguredError):
        await orchestrator.vector_search("rust")


@pytest.mark.asyncio
async def test_vector_search_applies_threshold():
    store = InMemorySessionStore()
    store.vector_matches = [
        VectorMatch(id="1", session_id="s", url="https://a.com", similarity=0.9),
        VectorMatch(id="2", session_id="s", url="https://b.com", similarity=0.5),
    ]
    orchestrator = build_orchestrator(store=store)

    result = await orchestrator.vector_search("rust", threshold=0.7)

    assert result.total_found == 1
    assert result.results[0].url == "https://a.com"


@pytest.mark.asyncio
async def test_search_history_lists_runs():
    store = InMemorySessionStore()
    orchestrator = build_orchestrator(store=store)

    await orchestrator.perform_deep_search("first")
    await orchestrator.perform_deep_search("second")
    history = await orchestrator.get_search_history(limit=1)

    assert [row.query for row in history] == ["second"]
    assert history[0].reports_count == 1


@pytest.mark.asyncio
async def test_cleanup_rejects_negative_age():
    orchestrator = build_orchestrator(store=InMemorySessionStore())

    with pytest.raises(ValueError):
        await orchestrator.cleanup_old_data(-1)


@pytest.mark.asyncio
async def test_health_check_without_store():
    health = await build_orchestrator().health_check()

    assert health["status"] == "healthy"
    assert health["database"]["status"] == "disabled"
