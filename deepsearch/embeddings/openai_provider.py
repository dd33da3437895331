"""OpenAI embedding provider."""

import structlog
from openai import AsyncOpenAI

from deepsearch.embeddings.base import EmbeddingProvider

logger = structlog.get_logger(__name__)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """OpenAI (or compatible) embeddings endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimension: int = 768,
        base_url: str | None = None,
    ):
        """
        Initialize OpenAI embedding provider.

        Args:
            api_key: OpenAI API key
            model: Model name
            dimension: Embedding dimension, requested explicitly from v3 models
            base_url: Alternative OpenAI-compatible endpoint
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model_name = model
        self.dimension = dimension

    def _request_kwargs(self) -> dict:
        kwargs = {"model": self.model_name}
        # Only text-embedding-3 models accept a dimensions argument
        if "-3-" in self.model_name:
            kwargs["dimensions"] = self.dimension
        return kwargs

    async def embed_text(self, text: str) -> list[float]:
        try:
            response = await self.client.embeddings.create(input=text, **self._request_kwargs())
        except Exception as e:
            logger.error("Failed to generate embedding", error=str(e), model=self.model_name)
            raise
        return response.data[0].embedding

    def get_dimension(self) -> int:
        return self.dimension
