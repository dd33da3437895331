"""Tests for the content-hash embedding cache."""

import pytest

from deepsearch.embeddings.cache import EmbeddingCache, InMemoryEmbeddingStore, fingerprint
from deepsearch.embeddings.mock_provider import MockEmbeddingProvider


class CountingProvider(MockEmbeddingProvider):
    def __init__(self, dimension=8):
        super().__init__(dimension)
        self.calls = []

    async def embed_text(self, text):
        self.calls.append(text)
        return await super().embed_text(text)


class BrokenStore:
    async def get_cached_embedding(self, content_hash):
        raise ConnectionError("database unavailable")

    async def cache_embedding(self, content_hash, content_preview, embedding, model_used):
        raise ConnectionError("database unavailable")


@pytest.mark.asyncio
async def test_identical_input_embedded_once():
    provider = CountingProvider()
    store = InMemoryEmbeddingStore()
    cache = EmbeddingCache(store, provider)

    first = await cache.get_or_embed("Title\n\nSome content")
    second = await cache.get_or_embed("Title\n\nSome content")

    assert len(provider.calls) == 1
    assert first.cache_hit is False
    assert second.cache_hit is True
    assert first.embedding == second.embedding
    assert first.content_hash == fingerprint("Title\n\nSome content")
    assert store.entries[first.content_hash]["model_used"] == "mock-embedding"


@pytest.mark.asyncio
async def test_input_truncated_before_hashing():
    provider = CountingProvider()
    cache = EmbeddingCache(InMemoryEmbeddingStore(), provider, max_chars=10, preview_chars=4)

    result = await cache.get_or_embed("0123456789-tail")

    assert provider.calls == ["0123456789"]
    assert result.content_hash == fingerprint("0123456789")
    assert result.text_length == 10
    assert cache.store.entries[result.content_hash]["content_preview"] == "0123"


@pytest.mark.asyncio
async def test_store_errors_degrade_to_provider_call():
    provider = CountingProvider()
    cache = EmbeddingCache(BrokenStore(), provider)

    result = await cache.get_or_embed("text")

    assert result.cache_hit is False
    assert len(result.embedding) == 8
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_mock_provider_is_deterministic_unit_vector():
    provider = MockEmbeddingProvider(dimension=16)

    first = await provider.embed_text("hello")
    second = await provider.embed_text("hello")

    assert first == second
    assert len(first) == 16
    assert abs(sum(v * v for v in first) - 1.0) < 1e-9
    assert await provider.embed_text("other") != first
