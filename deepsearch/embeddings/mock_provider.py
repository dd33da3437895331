"""Mock embedding provider for offline runs and tests."""

from __future__ import annotations

import hashlib
import math

from deepsearch.embeddings.base import EmbeddingProvider


class MockEmbeddingProvider(EmbeddingProvider):
    """Deterministic unit vectors derived from a hash of the text."""

    model_name = "mock-embedding"

    def __init__(self, dimension: int = 768) -> None:
        self.dimension = dimension

    async def embed_text(self, text: str) -> list[float]:
        values: list[float] = []
        counter = 0
        while len(values) < self.dimension:
            digest = hashlib.sha256(f"{counter}:{text}".encode("utf-8")).digest()
            values.extend((byte - 127.5) / 127.5 for byte in digest)
            counter += 1
        values = values[: self.dimension]
        norm = math.sqrt(sum(v * v for v in values)) or 1.0
        return [v / norm for v in values]

    def get_dimension(self) -> int:
        return self.dimension
