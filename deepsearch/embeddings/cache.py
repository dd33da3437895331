"""Content-addressed embedding cache."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Optional, Protocol

import structlog

from deepsearch.embeddings.base import EmbeddingProvider

logger = structlog.get_logger(__name__)


class EmbeddingStore(Protocol):
    """Persistence used by the cache, keyed by content hash."""

    async def get_cached_embedding(self, content_hash: str) -> Optional[list[float]]: ...

    async def cache_embedding(
        self, content_hash: str, content_preview: str, embedding: list[float], model_used: str
    ) -> None: ...


class InMemoryEmbeddingStore:
    """Process-local store for runs without a database."""

    def __init__(self) -> None:
        self.entries: dict[str, dict] = {}

    async def get_cached_embedding(self, content_hash: str) -> Optional[list[float]]:
        entry = self.entries.get(content_hash)
        return list(entry["embedding"]) if entry else None

    async def cache_embedding(
        self, content_hash: str, content_preview: str, embedding: list[float], model_used: str
    ) -> None:
        self.entries[content_hash] = {
            "content_preview": content_preview,
            "embedding": list(embedding),
            "model_used": model_used,
        }


@dataclass
class CachedEmbedding:
    content_hash: str
    embedding: list[float]
    model: str
    text_length: int
    cache_hit: bool


def fingerprint(text: str) -> str:
    """MD5 hex digest of the exact embedding input."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class EmbeddingCache:
    """Reuses vectors for identical embedding inputs across runs."""

    def __init__(
        self,
        store: EmbeddingStore,
        provider: EmbeddingProvider,
        max_chars: int = 8000,
        preview_chars: int = 500,
    ):
        """
        Initialize embedding cache.

        Args:
            store: Backing store (database or in-memory)
            provider: Embedding provider called on cache misses
            max_chars: Input truncation applied before hashing
            preview_chars: Length of the stored content preview
        """
        self.store = store
        self.provider = provider
        self.max_chars = max_chars
        self.preview_chars = preview_chars

    def prepare(self, text: str) -> str:
        return text[: self.max_chars]

    async def get_or_embed(self, text: str) -> CachedEmbedding:
        """
        Return the embedding for ``text``, computing it only on a cache miss.

        Store errors degrade to a miss on read and are logged on write.
        Provider errors propagate to the caller.
        """
        prepared = self.prepare(text)
        content_hash = fingerprint(prepared)

        try:
            cached = await self.store.get_cached_embedding(content_hash)
        except Exception as e:
            logger.warning("Embedding cache lookup failed", error=str(e), content_hash=content_hash)
            cached = None

        if cached is not None:
            logger.debug("Embedding cache hit", content_hash=content_hash)
            return CachedEmbedding(
                content_hash=content_hash,
                embedding=cached,
                model=self.provider.model_name,
                text_length=len(prepared),
                cache_hit=True,
            )

        embedding = await self.provider.embed_text(prepared)

        try:
            await self.store.cache_embedding(
                content_hash,
                prepared[: self.preview_chars],
                embedding,
                self.provider.model_name,
            )
        except Exception as e:
            logger.warning("Embedding cache write failed", error=str(e), content_hash=content_hash)

        logger.debug("Embedding cache miss", content_hash=content_hash, text_length=len(prepared))
        return CachedEmbedding(
            content_hash=content_hash,
            embedding=embedding,
            model=self.provider.model_name,
            text_length=len(prepared),
            cache_hit=False,
        )
