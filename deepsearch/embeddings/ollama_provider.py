"""Ollama embedding provider for local embeddings."""

import aiohttp
import structlog

from deepsearch.embeddings.base import EmbeddingProvider
from deepsearch.search.http import client_session

logger = structlog.get_logger(__name__)


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embeddings from a local Ollama server (``/api/embeddings``)."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        dimension: int = 768,
        timeout: float = 60.0,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize Ollama embedding provider.

        Args:
            base_url: Ollama server URL
            model: Model name
            dimension: Expected dimension until the first response is seen
            timeout: Request timeout in seconds
            session: Shared aiohttp session; a session per request is used if omitted
        """
        self.base_url = base_url.rstrip("/")
        self.model_name = model
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._dimension = dimension
        self._observed = False
        self._session = session

    async def embed_text(self, text: str) -> list[float]:
        """Generate embedding for single text."""
        try:
            async with client_session(self._session, self.timeout, {}) as session:
                async with session.post(
                    f"{self.base_url}/api/embeddings",
                    json={"model": self.model_name, "prompt": text},
                    timeout=self.timeout,
                ) as response:
                    response.raise_for_status()
                    data = await response.json()
        except Exception as e:
            logger.error("Failed to generate Ollama embedding", error=str(e), model=self.model_name)
            raise

        embedding = data.get("embedding")
        if not embedding:
            raise ValueError(f"Ollama returned no embedding for model {self.model_name}")

        if not self._observed:
            self._dimension = len(embedding)
            self._observed = True
        return embedding

    def get_dimension(self) -> int:
        return self._dimension
