"""Factory for creating embedding providers."""

from typing import Optional

import aiohttp
import structlog

from deepsearch.config.settings import Settings
from deepsearch.embeddings.base import EmbeddingProvider
from deepsearch.embeddings.mock_provider import MockEmbeddingProvider
from deepsearch.embeddings.ollama_provider import OllamaEmbeddingProvider
from deepsearch.embeddings.openai_provider import OpenAIEmbeddingProvider

logger = structlog.get_logger(__name__)


def create_embedding_provider(
    settings: Settings, session: Optional[aiohttp.ClientSession] = None
) -> EmbeddingProvider:
    """
    Create embedding provider based on settings.

    Args:
        settings: Application settings
        session: Shared aiohttp session for HTTP based providers

    Returns:
        Embedding provider instance

    Raises:
        ValueError: If provider is not supported or required API key is missing
    """
    provider = settings.embedding_provider.lower()

    if provider == "mock" or settings.llm_mode == "mock":
        logger.info("Creating mock embedding provider", dimension=settings.embedding_dimension)
        return MockEmbeddingProvider(dimension=settings.embedding_dimension)

    if provider == "ollama":
        logger.info(
            "Creating Ollama embedding provider",
            base_url=settings.ollama_base_url,
            model=settings.ollama_embedding_model,
        )
        return OllamaEmbeddingProvider(
            base_url=settings.ollama_base_url,
            model=settings.ollama_embedding_model,
            dimension=settings.embedding_dimension,
            timeout=settings.llm_timeout,
            session=session,
        )

    if provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OpenAI API key is required for OpenAI embedding provider")

        logger.info(
            "Creating OpenAI embedding provider",
            model=settings.openai_embedding_model,
            dimension=settings.embedding_dimension,
        )
        return OpenAIEmbeddingProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_embedding_model,
            dimension=settings.embedding_dimension,
            base_url=settings.openai_base_url,
        )

    raise ValueError(f"Unsupported embedding provider: {provider}")
