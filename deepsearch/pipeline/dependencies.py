"""Dependency container wiring the pipeline from settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog

from deepsearch.analysis.service import AnalysisService
from deepsearch.config.settings import Settings
from deepsearch.database.connection import DatabaseManager
from deepsearch.database.repository import SessionStore
from deepsearch.embeddings.cache import EmbeddingCache, InMemoryEmbeddingStore
from deepsearch.embeddings.factory import create_embedding_provider
from deepsearch.pipeline.analyzer import AnalyzerConfig, SourceAnalyzer
from deepsearch.pipeline.orchestrator import DeepSearchOrchestrator
from deepsearch.pipeline.report import ReportConfig, ReportSynthesizer
from deepsearch.search.coordinator import RetrievalConfig, RetrievalCoordinator
from deepsearch.search.factory import create_content_fetcher, create_search_provider
from deepsearch.search.throttle import RequestThrottle
from deepsearch.search.urls import DomainFilter

logger = structlog.get_logger(__name__)


@dataclass
class DeepSearchDependencies:
    """Everything a run needs, plus the resources that must be closed."""

    settings: Settings
    http_session: aiohttp.ClientSession
    analysis: AnalysisService
    orchestrator: DeepSearchOrchestrator
    db_manager: Optional[DatabaseManager] = None

    async def aclose(self) -> None:
        await self.http_session.close()
        if self.db_manager is not None:
            await self.db_manager.close_engine()
        logger.debug("Pipeline resources closed")


async def build_dependencies(settings: Settings, use_database: bool = True) -> DeepSearchDependencies:
    """
    Build the orchestrator and its collaborators.

    Args:
        settings: Application settings
        use_database: Connect the PostgreSQL session store; an in-memory
            embedding cache is used otherwise

    Returns:
        Dependency container; call ``aclose`` when done
    """
    http_session = aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.search_timeout),
        headers={"User-Agent": settings.user_agent},
    )

    db_manager = None
    store = None
    if use_database:
        db_manager = DatabaseManager(settings)
        try:
            await db_manager.init_engine()
            await db_manager.create_tables()
        except Exception:
            await http_session.close()
            await db_manager.close_engine()
            raise
        store = SessionStore(db_manager.session_factory)

    embedder = create_embedding_provider(settings, http_session)
    analysis = AnalysisService.from_settings(settings, embedder, http_session)
    throttle = RequestThrottle.from_settings(settings)

    coordinator = RetrievalCoordinator(
        provider=create_search_provider(settings, http_session),
        fetcher=create_content_fetcher(settings, http_session),
        analysis=analysis,
        config=RetrievalConfig.from_settings(settings),
        domain_filter=DomainFilter(settings.allowed_domain_list, settings.blocked_domain_list),
        throttle=throttle,
    )
    cache = EmbeddingCache(
        store if store is not None else InMemoryEmbeddingStore(),
        embedder,
        max_chars=settings.embedding_max_chars,
    )
    analyzer = SourceAnalyzer(
        analysis=analysis,
        embedding_cache=cache,
        store=store,
        config=AnalyzerConfig.from_settings(settings),
        throttle=throttle,
    )
    synthesizer = ReportSynthesizer(analysis=analysis, store=store, config=ReportConfig.from_settings(settings))

    orchestrator = DeepSearchOrchestrator(
        coordinator=coordinator,
        analyzer=analyzer,
        synthesizer=synthesizer,
        analysis=analysis,
        store=store,
        vector_search_limit=settings.max_vector_search_results,
    )

    logger.info(
        "Pipeline dependencies built",
        database=use_database,
        llm_model=settings.llm_model,
        embedding_provider=settings.embedding_provider,
    )
    return DeepSearchDependencies(
        settings=settings,
        http_session=http_session,
        analysis=analysis,
        orchestrator=orchestrator,
        db_manager=db_manager,
    )
