"""Run orchestration for deep searches."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import structlog

from deepsearch.errors import InvalidQueryError, StoreNotConfiguredError, WebSearchError
from deepsearch.pipeline.analyzer import SourceAnalyzer
from deepsearch.pipeline.consolidator import consolidate
from deepsearch.pipeline.models import (
    AnalysisResult,
    DeepSearchOptions,
    DeepSearchResult,
    RunStage,
    VectorSearchResult,
)
from deepsearch.pipeline.report import ReportSynthesizer
from deepsearch.search.coordinator import RetrievalCoordinator
from deepsearch.utils.date import get_current_datetime

if TYPE_CHECKING:
    from deepsearch.analysis.service import AnalysisService
    from deepsearch.database.models import SessionDetails, SessionSummary, StoreStatistics
    from deepsearch.database.repository import SessionStore

logger = structlog.get_logger(__name__)

STAGE_ORDER = [
    RunStage.CREATED,
    RunStage.TERMS_GENERATED,
    RunStage.WEB_SEARCHED,
    RunStage.ANALYZED,
    RunStage.REPORTED,
    RunStage.COMPLETED,
]


def _next_stage(stage: RunStage) -> RunStage:
    index = STAGE_ORDER.index(stage)
    return STAGE_ORDER[min(index + 1, len(STAGE_ORDER) - 1)]


class DeepSearchOrchestrator:
    """Coordinates retrieval, analysis and reporting for one query at a time."""

    def __init__(
        self,
        coordinator: RetrievalCoordinator,
        analyzer: SourceAnalyzer,
        synthesizer: ReportSynthesizer,
        analysis: "AnalysisService",
        store: Optional["SessionStore"] = None,
        vector_search_limit: int = 10,
    ):
        """
        Initialize the orchestrator.

        Args:
            coordinator: Retrieval phase
            analyzer: Per-source analysis phase
            synthesizer: Report phase
            analysis: Model service, used directly for query embeddings and health
            store: Session store; runs are not persisted without one
            vector_search_limit: Default number of vector search results
        """
        self.coordinator = coordinator
        self.analyzer = analyzer
        self.synthesizer = synthesizer
        self.analysis = analysis
        self.store = store
        self.vector_search_limit = vector_search_limit

    def _require_store(self) -> "SessionStore":
        if self.store is None:
            raise StoreNotConfiguredError("This operation needs a database-backed session store")
        return self.store

    async def perform_deep_search(
        self, query: str, options: DeepSearchOptions | None = None
    ) -> DeepSearchResult:
        """
        Run the whole pipeline for a query.

        Args:
            query: Natural-language research query
            options: Run options

        Returns:
            Search terms, web results, analysis and report of the run

        Raises:
            InvalidQueryError: If the query is empty or not a string
            WebSearchError: If the web search phase fails
            ReportGenerationError: If the report cannot be generated
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidQueryError("Query must be a non-empty string")

        options = options or DeepSearchOptions()
        persist = options.save_to_database and self.store is not None
        metadata: dict[str, Any] = {
            "options": options.model_dump(),
            "start_time": get_current_datetime(),
        }

        logger.info("Starting deep search", query=query, persist=persist)

        session_id: str | None = None
        if persist:
            session_id = await self.store.create_session(query, metadata)

        stage = RunStage.CREATED
        try:
            expansion = await self.coordinator.generate_search_terms(query)
            stage = RunStage.TERMS_GENERATED

            try:
                web_results = await self.coordinator.retrieve(
                    query,
                    max_results=options.max_sources,
                    use_advanced_search=options.use_advanced_search,
                    expansion=expansion,
                )
            except Exception as e:
                raise WebSearchError(f"Web search failed: {e}") from e
            stage = RunStage.WEB_SEARCHED

            analyzed = await self.analyzer.analyze_all(
                query,
                web_results.sources,
                generate_embeddings=options.generate_embeddings,
                session_id=session_id,
            )
            analysis = AnalysisResult(
                individual_analyses=analyzed,
                consolidated=consolidate(query, analyzed),
                total_sources=len(web_results.sources),
                successful_analyses=len(analyzed),
            )
            stage = RunStage.ANALYZED

            report = await self.synthesizer.synthesize(query, analysis, session_id=session_id)
            stage = RunStage.REPORTED

            if session_id:
                await self.store.update_session(
                    session_id,
                    "completed",
                    {
                        **metadata,
                        "completed_time": get_current_datetime(),
                        "search_terms": expansion.search_terms,
                        "sources_found": len(web_results.sources),
                        "successful_analyses": analysis.successful_analyses,
                        "report_generated": True,
                    },
                )
            stage = RunStage.COMPLETED

        except Exception as e:
            failed_stage = _next_stage(stage)
            logger.error("Deep search failed", error=str(e), failed_stage=failed_stage.value, session_id=session_id)
            if session_id:
                await self._mark_error(session_id, metadata, e, stage, failed_stage)
            raise

        logger.info(
            "Deep search completed",
            session_id=session_id,
            sources=len(web_results.sources),
            successful_analyses=analysis.successful_analyses,
        )
        return DeepSearchResult(
            session_id=session_id,
            query=query,
            search_terms=expansion.search_terms,
            categories=expansion.categories,
            web_results=web_results,
            analysis=analysis,
            report=report,
        )

    async def _mark_error(
        self,
        session_id: str,
        metadata: dict[str, Any],
        error: Exception,
        last_stage: RunStage,
        failed_stage: RunStage,
    ) -> None:
        try:
            await self.store.update_session(
                session_id,
                RunStage.ERROR.value,
                {
                    **metadata,
                    "error": str(error),
                    "error_time": get_current_datetime(),
                    "last_stage": last_stage.value,
                    "failed_stage": failed_stage.value,
                },
            )
        except Exception as update_error:
            logger.error("Failed to mark session as errored", error=str(update_error), session_id=session_id)

    async def vector_search(
        self, query: str, limit: int | None = None, threshold: float = 0.7
    ) -> VectorSearchResult:
        """Find stored sources semantically similar to ``query``."""
        if not isinstance(query, str) or not query.strip():
            raise InvalidQueryError("Query must be a non-empty string")
        store = self._require_store()

        embedding = await self.analysis.embed(query)
        results = await store.vector_search(
            embedding.embedding, limit=limit or self.vector_search_limit, threshold=threshold
        )
        return VectorSearchResult(query=query, results=results, total_found=len(results))

    async def get_search_history(self, limit: int = 10, offset: int = 0) -> list["SessionSummary"]:
        return await self._require_store().get_search_history(limit=limit, offset=offset)

    async def get_session_details(self, session_id: str) -> Optional["SessionDetails"]:
        return await self._require_store().get_session_details(session_id)

    async def get_statistics(self) -> "StoreStatistics":
        return await self._require_store().get_statistics()

    async def cleanup_old_data(self, days_old: int = 30) -> int:
        if days_old < 0:
            raise ValueError("days_old must not be negative")
        return await self._require_store().cleanup_old_data(days_old)

    async def health_check(self) -> dict[str, Any]:
        """Database and model service health."""
        if self.store is None:
            database: dict[str, Any] = {"status": "disabled", "message": "No database configured"}
        else:
            database = await self.store.health_check()

        llm = await self.analysis.health_check()
        healthy = database["status"] in {"ok", "disabled"} and llm["status"] == "healthy"
        return {
            "status": "healthy" if healthy else "degraded",
            "database": database,
            "llm": llm,
            "timestamp": get_current_datetime(),
        }

    async def list_models(self) -> list[dict[str, Any]]:
        return await self.analysis.list_models()
