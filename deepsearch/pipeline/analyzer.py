"""Per-source analysis with gated, cached embeddings."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

import structlog

from deepsearch.config.settings import Settings
from deepsearch.embeddings.cache import EmbeddingCache
from deepsearch.pipeline.models import AnalyzedSource
from deepsearch.search.models import ScrapedSource
from deepsearch.search.throttle import RequestThrottle

if TYPE_CHECKING:
    from deepsearch.analysis.service import AnalysisService
    from deepsearch.database.repository import SessionStore

logger = structlog.get_logger(__name__)


@dataclass
class AnalyzerConfig:
    """Source analyzer options."""

    batch_size: int = 5
    relevance_threshold: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyzerConfig":
        return cls(
            batch_size=settings.parallel_processing_limit,
            relevance_threshold=settings.relevance_threshold,
        )


def embedding_input(source: ScrapedSource) -> str:
    return f"{source.title}\n\n{source.content}"


class SourceAnalyzer:
    """Scores, embeds and persists scraped sources."""

    def __init__(
        self,
        analysis: "AnalysisService",
        embedding_cache: EmbeddingCache,
        store: Optional["SessionStore"] = None,
        config: AnalyzerConfig | None = None,
        throttle: RequestThrottle | None = None,
    ):
        self.analysis = analysis
        self.embedding_cache = embedding_cache
        self.store = store
        self.config = config or AnalyzerConfig()
        self.throttle = throttle or RequestThrottle()

    async def analyze(
        self,
        query: str,
        source: ScrapedSource,
        generate_embeddings: bool = True,
        session_id: str | None = None,
    ) -> Optional[AnalyzedSource]:
        """
        Analyze one source.

        Args:
            query: Research query
            source: Scraped source
            generate_embeddings: Embed the source when it is relevant enough
            session_id: Persist the source under this session when set

        Returns:
            AnalyzedSource, or None when the analysis failed
        """
        try:
            analysis = await self.analysis.analyze_content(query, source.content)
        except Exception as e:
            logger.warning("Source analysis failed", error=str(e), url=source.url)
            return None

        embedding: list[float] | None = None
        content_hash: str | None = None
        cached = False

        if generate_embeddings and analysis.relevance_score > self.config.relevance_threshold:
            try:
                result = await self.embedding_cache.get_or_embed(embedding_input(source))
                embedding, content_hash, cached = result.embedding, result.content_hash, result.cache_hit
            except Exception as e:
                logger.warning("Embedding generation failed", error=str(e), url=source.url)

        if session_id and self.store is not None:
            await self._persist(session_id, source, analysis.summary, embedding, analysis.model_dump())

        return AnalyzedSource(
            source=source,
            analysis=analysis,
            embedding=embedding,
            content_hash=content_hash,
            embedding_cached=cached,
        )

    async def _persist(
        self,
        session_id: str,
        source: ScrapedSource,
        summary: str,
        embedding: list[float] | None,
        analysis: dict[str, Any],
    ) -> None:
        metadata = {
            "search_term": source.search_term,
            "dork": source.dork,
            "word_count": source.word_count,
            "relevance_score": analysis["relevance_score"],
            "credibility_score": analysis["credibility_score"],
            "description": source.description,
        }
        try:
            await self.store.save_web_source(session_id, source, summary, embedding, metadata)
        except Exception as e:
            logger.error("Failed to persist web source", error=str(e), url=source.url, session_id=session_id)

    async def analyze_all(
        self,
        query: str,
        sources: list[ScrapedSource],
        generate_embeddings: bool = True,
        session_id: str | None = None,
    ) -> list[AnalyzedSource]:
        """
        Analyze sources in concurrent batches.

        Failed members are dropped without affecting their batch.
        """
        batch_size = max(1, self.config.batch_size)
        analyzed: list[AnalyzedSource] = []

        for start in range(0, len(sources), batch_size):
            if start:
                await self.throttle.wait("batch")
            batch = sources[start : start + batch_size]
            results = await asyncio.gather(
                *(self.analyze(query, source, generate_embeddings, session_id) for source in batch),
                return_exceptions=True,
            )
            for source, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.warning("Source analysis raised", error=str(result), url=source.url)
                elif result is not None:
                    analyzed.append(result)

        logger.info("Content analysis completed", total=len(sources), successful=len(analyzed))
        return analyzed
