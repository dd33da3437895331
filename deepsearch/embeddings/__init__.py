"""Embedding providers and the content-hash embedding cache."""

from deepsearch.embeddings.base import EmbeddingProvider
from deepsearch.embeddings.cache import EmbeddingCache, InMemoryEmbeddingStore, fingerprint
from deepsearch.embeddings.factory import create_embedding_provider

__all__ = [
    "EmbeddingProvider",
    "EmbeddingCache",
    "InMemoryEmbeddingStore",
    "fingerprint",
    "create_embedding_provider",
]
