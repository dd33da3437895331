"""Chat model factory for the model service tasks."""

from __future__ import annotations

import structlog
from langchain_anthropic import ChatAnthropic
from langchain_community.chat_models import ChatOllama
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from deepsearch.config.settings import Settings
from deepsearch.llm.mock import MockChatModel

logger = structlog.get_logger(__name__)


def split_model_string(model_str: str) -> tuple[str, str]:
    """Split ``provider:model``; a bare model name is served by Ollama."""
    if ":" in model_str:
        provider, model_name = model_str.split(":", 1)
        if provider in {"ollama", "openai", "anthropic", "claude", "mock"}:
            return provider, model_name
    return "ollama", model_str


def create_chat_model(
    model_str: str,
    settings: Settings,
    max_tokens: int,
    temperature: float = 0.7,
) -> BaseChatModel:
    """Create a chat model from provider:model string."""
    provider, model_name = split_model_string(model_str)

    if settings.llm_mode == "mock" or provider == "mock":
        logger.info("Using mock chat model")
        return MockChatModel()

    if provider == "ollama":
        logger.debug("Creating Ollama chat model", model=model_name, base_url=settings.ollama_base_url)
        return ChatOllama(
            model=model_name,
            base_url=settings.ollama_base_url,
            temperature=temperature,
            num_predict=max_tokens,
        )

    if provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OpenAI API key not configured")

        llm_kwargs = {
            "model": model_name,
            "api_key": settings.openai_api_key,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "timeout": settings.llm_timeout,
        }
        if settings.openai_base_url:
            llm_kwargs["base_url"] = settings.openai_base_url

        logger.debug("Creating OpenAI chat model", model=model_name)
        return ChatOpenAI(**llm_kwargs)

    if provider in {"anthropic", "claude"}:
        if not settings.anthropic_api_key:
            raise ValueError("Anthropic API key not configured")

        logger.debug("Creating Anthropic chat model", model=model_name)
        return ChatAnthropic(
            model=model_name,
            api_key=settings.anthropic_api_key,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    raise ValueError(f"Unsupported LLM provider: {provider}")
