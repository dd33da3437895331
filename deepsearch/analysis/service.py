"""Request/response contract with the language model and embedding services."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from deepsearch.analysis.parsing import (
    decode_search_terms,
    decode_source_analysis,
    fallback_search_terms,
    fallback_source_analysis,
)
from deepsearch.analysis.prompts import (
    ReportPromptBuilder,
    SearchTermsPromptBuilder,
    SourceAnalysisPromptBuilder,
)
from deepsearch.analysis.schemas import EmbeddingResult, SourceAnalysis
from deepsearch.config.settings import Settings
from deepsearch.embeddings.base import EmbeddingProvider
from deepsearch.errors import AnalysisParseError, AnalysisServiceError
from deepsearch.llm.factory import create_chat_model, split_model_string
from deepsearch.search.http import client_session
from deepsearch.search.models import SearchTermsExpansion

logger = structlog.get_logger(__name__)

TERMS_TEMPERATURE = 0.3
ANALYSIS_TEMPERATURE = 0.2
REPORT_TEMPERATURE = 0.4


class AnalysisService:
    """Expand-terms, analyze-content, synthesize-report and embed tasks."""

    def __init__(
        self,
        terms_model: BaseChatModel,
        analysis_model: BaseChatModel,
        report_model: BaseChatModel,
        embedder: EmbeddingProvider,
        timeout: float = 120.0,
        parse_fallback: bool = True,
        max_content_chars: int = 8000,
        model_name: str = "unknown",
        ollama_base_url: str | None = None,
        http_session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize the service.

        Args:
            terms_model: Chat model for search term expansion
            analysis_model: Chat model for per-source analysis
            report_model: Chat model for the final report
            embedder: Embedding provider for the embed task
            timeout: Timeout per model call in seconds
            parse_fallback: Use a neutral analysis when a response cannot be decoded
            max_content_chars: Source content sent to the analysis model
            model_name: Configured chat model, reported by health checks
            ollama_base_url: Ollama server used for health and model listing
            http_session: Shared aiohttp session for model listing
        """
        self.terms_model = terms_model
        self.analysis_model = analysis_model
        self.report_model = report_model
        self.embedder = embedder
        self.timeout = timeout
        self.parse_fallback = parse_fallback
        self.model_name = model_name
        self.ollama_base_url = ollama_base_url.rstrip("/") if ollama_base_url else None
        self._http_session = http_session

        self.terms_prompts = SearchTermsPromptBuilder()
        self.analysis_prompts = SourceAnalysisPromptBuilder(max_content_chars)
        self.report_prompts = ReportPromptBuilder()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        embedder: EmbeddingProvider,
        http_session: aiohttp.ClientSession | None = None,
    ) -> "AnalysisService":
        """Build the three task models from settings."""
        provider, _ = split_model_string(settings.llm_model)
        return cls(
            terms_model=create_chat_model(
                settings.llm_model, settings, settings.search_terms_max_tokens, TERMS_TEMPERATURE
            ),
            analysis_model=create_chat_model(
                settings.llm_model, settings, settings.analysis_max_tokens, ANALYSIS_TEMPERATURE
            ),
            report_model=create_chat_model(
                settings.llm_model, settings, settings.report_max_tokens, REPORT_TEMPERATURE
            ),
            embedder=embedder,
            timeout=settings.llm_timeout,
            parse_fallback=settings.analysis_parse_fallback,
            model_name=settings.llm_model,
            ollama_base_url=settings.ollama_base_url
            if provider == "ollama" and settings.llm_mode == "live"
            else None,
            http_session=http_session,
        )

    async def _invoke(self, task: str, model: BaseChatModel, messages: list[BaseMessage]) -> str:
        try:
            response = await asyncio.wait_for(model.ainvoke(messages), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error("Model call timed out", task=task, timeout=self.timeout)
            raise AnalysisServiceError(task, f"timed out after {self.timeout}s") from e
        except Exception as e:
            logger.error("Model call failed", task=task, error=str(e))
            raise AnalysisServiceError(task, str(e)) from e

        content = response.content if hasattr(response, "content") else response
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part) for part in content
            )
        return str(content)

    async def expand_terms(self, query: str) -> SearchTermsExpansion:
        """
        Expand a query into 5-10 search terms with categories.

        Undecodable responses are recovered with ``fallback_search_terms``.

        Raises:
            AnalysisServiceError: If the model call itself fails
        """
        prompt = self.terms_prompts.build(query)
        text = await self._invoke("expand_terms", self.terms_model, [HumanMessage(content=prompt)])

        try:
            return decode_search_terms(query, text)
        except AnalysisParseError as e:
            logger.warning("Search terms response not decodable, extracting quoted terms", error=str(e))
            return fallback_search_terms(query, text)

    async def analyze_content(self, query: str, content: str) -> SourceAnalysis:
        """
        Score and summarize one source.

        Raises:
            AnalysisServiceError: If the model call fails
            AnalysisParseError: If the response is not decodable and the
                parse fallback is disabled
        """
        prompt = self.analysis_prompts.build(query, content)
        text = await self._invoke("analyze_content", self.analysis_model, [HumanMessage(content=prompt)])

        try:
            return decode_source_analysis(text)
        except AnalysisParseError as e:
            if not self.parse_fallback:
                raise
            logger.warning("Analysis response not decodable, using neutral analysis", error=str(e))
            return fallback_source_analysis(content)

    async def synthesize_report(self, query: str, analysis_data: dict[str, Any]) -> str:
        """
        Write the markdown report from consolidated analysis data.

        Raises:
            AnalysisServiceError: If the model call fails or returns nothing
        """
        messages = [
            SystemMessage(content=self.report_prompts.system_prompt),
            HumanMessage(content=self.report_prompts.build(query, analysis_data)),
        ]
        text = await self._invoke("synthesize_report", self.report_model, messages)
        if not text.strip():
            raise AnalysisServiceError("synthesize_report", "empty response")
        return text.strip()

    async def embed(self, text: str) -> EmbeddingResult:
        """
        Embed text with the configured provider.

        Raises:
            AnalysisServiceError: If the provider fails
        """
        try:
            vector = await asyncio.wait_for(self.embedder.embed_text(text), timeout=self.timeout)
        except Exception as e:
            raise AnalysisServiceError("embed", str(e) or type(e).__name__) from e
        return EmbeddingResult(embedding=vector, model=self.embedder.model_name, text_length=len(text))

    async def list_models(self) -> list[dict[str, Any]]:
        """
        Models available on the Ollama server.

        Other providers report only the configured model.
        """
        if self.ollama_base_url is None:
            return [{"name": self.model_name}]

        try:
            timeout = aiohttp.ClientTimeout(total=10)
            async with client_session(self._http_session, timeout, {}) as session:
                async with session.get(f"{self.ollama_base_url}/api/tags", timeout=timeout) as response:
                    response.raise_for_status()
                    data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Failed to list models", error=str(e), base_url=self.ollama_base_url)
            raise AnalysisServiceError("list_models", str(e)) from e

        return [
            {"name": model.get("name"), "size": model.get("size"), "modified_at": model.get("modified_at")}
            for model in data.get("models", [])
        ]

    async def health_check(self) -> dict[str, Any]:
        """Report whether the model service is reachable and the model is present."""
        try:
            models = await self.list_models()
        except AnalysisServiceError as e:
            return {"status": "unhealthy", "model": self.model_name, "error": str(e)}

        names = {model.get("name") for model in models}
        _, bare_name = split_model_string(self.model_name)
        available = self.ollama_base_url is None or bare_name in names
        return {
            "status": "healthy" if available else "degraded",
            "model": self.model_name,
            "model_available": available,
            "models_count": len(models),
        }
