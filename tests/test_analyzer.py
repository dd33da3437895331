"""Tests for per-source analysis."""

import pytest

from deepsearch.embeddings.cache import EmbeddingCache, InMemoryEmbeddingStore
from deepsearch.embeddings.mock_provider import MockEmbeddingProvider
from deepsearch.errors import AnalysisServiceError
from deepsearch.pipeline.analyzer import AnalyzerConfig, SourceAnalyzer, embedding_input
from deepsearch.search.throttle import RequestThrottle
from tests.mocks import InMemorySessionStore, ScriptedAnalysisService, make_source
from tests.mocks.mock_llm import default_analysis


class CountingEmbedder(MockEmbeddingProvider):
    def __init__(self):
        super().__init__(dimension=4)
        self.calls = 0

    async def embed_text(self, text):
        self.calls += 1
        return await super().embed_text(text)


class FailingEmbedder(MockEmbeddingProvider):
    async def embed_text(self, text):
        raise ConnectionError("embedding server unreachable")


class FailingSaveStore(InMemorySessionStore):
    async def save_web_source(self, *args, **kwargs):
        raise ConnectionError("write failed")


def make_analyzer(analysis, store=None, embedder=None, batch_size=5):
    embedder = embedder or CountingEmbedder()
    return SourceAnalyzer(
        analysis=analysis,
        embedding_cache=EmbeddingCache(InMemoryEmbeddingStore(), embedder),
        store=store,
        config=AnalyzerConfig(batch_size=batch_size, relevance_threshold=30),
        throttle=RequestThrottle.disabled(),
    )


def fail_on(*urls, relevance=80):
    def analyze(query, content):
        for url in urls:
            if url in content:
                raise AnalysisServiceError("analyze_content", "connection reset")
        return default_analysis(relevance)

    return analyze


@pytest.mark.asyncio
async def test_failed_sources_are_dropped():
    sources = [make_source(f"https://example.com/{i}") for i in range(5)]
    analysis = ScriptedAnalysisService(analyze=fail_on("https://example.com/1.", "https://example.com/3."))
    analyzer = make_analyzer(analysis, batch_size=2)

    results = await analyzer.analyze_all("query", sources)

    assert [r.source.url for r in results] == [
        "https://example.com/0",
        "https://example.com/2",
        "https://example.com/4",
    ]


@pytest.mark.asyncio
async def test_embedding_gated_by_relevance():
    embedder = CountingEmbedder()
    low = make_analyzer(ScriptedAnalysisService(analyze=fail_on(relevance=30)), embedder=embedder)
    high = make_analyzer(ScriptedAnalysisService(analyze=fail_on(relevance=31)), embedder=embedder)

    low_result = await low.analyze("query", make_source("https://a.com"))
    high_result = await high.analyze("query", make_source("https://b.com"))

    assert low_result.embedding is None
    assert high_result.embedding is not None
    assert high_result.content_hash is not None
    assert embedder.calls == 1


@pytest.mark.asyncio
async def test_embedding_failure_keeps_source():
    store = InMemorySessionStore()
    session_id = await store.create_session("query")
    analyzer = make_analyzer(ScriptedAnalysisService(), store=store, embedder=FailingEmbedder(dimension=4))

    results = await analyzer.analyze_all("query", [make_source("https://a.com")], session_id=session_id)

    assert len(results) == 1
    assert results[0].embedding is None
    assert results[0].content_hash is None
    assert store.sources[0]["embedding"] is None


@pytest.mark.asyncio
async def test_embeddings_can_be_disabled():
    embedder = CountingEmbedder()
    analyzer = make_analyzer(ScriptedAnalysisService(), embedder=embedder)

    result = await analyzer.analyze("query", make_source("https://a.com"), generate_embeddings=False)

    assert result.embedding is None
    assert embedder.calls == 0


@pytest.mark.asyncio
async def test_duplicate_content_embedded_once():
    embedder = CountingEmbedder()
    analyzer = make_analyzer(ScriptedAnalysisService(), embedder=embedder)
    source = make_source("https://a.com", content="same text " * 20)

    first = await analyzer.analyze("query", source)
    second = await analyzer.analyze("query", source)

    assert embedder.calls == 1
    assert first.embedding_cached is False
    assert second.embedding_cached is True


@pytest.mark.asyncio
async def test_sources_persisted_with_session():
    store = InMemorySessionStore()
    session_id = await store.create_session("query")
    analyzer = make_analyzer(ScriptedAnalysisService(), store=store)

    await analyzer.analyze_all("query", [make_source("https://a.com"), make_source("https://b.com")], session_id=session_id)

    assert [s["url"] for s in store.sources] == ["https://a.com", "https://b.com"]
    assert store.sources[0]["summary"] == "A summary"
    assert store.sources[0]["metadata"]["relevance_score"] == 80
    assert store.sources[0]["embedding"] is not None


@pytest.mark.asyncio
async def test_store_write_failure_keeps_analysis():
    analyzer = make_analyzer(ScriptedAnalysisService(), store=FailingSaveStore())

    result = await analyzer.analyze("query", make_source("https://a.com"), session_id="session")

    assert result is not None


def test_embedding_input():
    source = make_source("https://a.com", content="Body text", title="Heading")

    assert embedding_input(source) == "Heading\n\nBody text"
