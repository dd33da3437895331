"""Session store: all persistence access patterns of the pipeline."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

import structlog
from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from deepsearch.database.models import (
    ReportRecord,
    SessionDetails,
    SessionRecord,
    SessionSummary,
    StoreStatistics,
    VectorMatch,
    WebSourceRecord,
)
from deepsearch.database.schema import (
    EmbeddingCacheModel,
    ReportModel,
    SearchSessionModel,
    WebSourceModel,
)
from deepsearch.search.models import ScrapedSource
from deepsearch.utils.date import utc_now

logger = structlog.get_logger(__name__)


def _vector_to_list(value: Any) -> Optional[list[float]]:
    if value is None:
        return None
    return [float(x) for x in value]


class SessionStore:
    """PostgreSQL/pgvector backed store.

    Each operation opens and commits its own session from the factory.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize session store.

        Args:
            session_factory: AsyncSession factory for database access
        """
        self.session_factory = session_factory

    async def create_session(self, query: str, metadata: dict[str, Any] | None = None) -> str:
        """Insert a pending session and return its id."""
        async with self.session_factory() as session:
            db_session = SearchSessionModel(query=query, status="pending", session_metadata=metadata or {})
            session.add(db_session)
            await session.commit()
            logger.info("Search session created", session_id=db_session.id)
            return db_session.id

    async def update_session(
        self, session_id: str, status: str, metadata: dict[str, Any] | None = None
    ) -> None:
        """Set status and, when given, replace the metadata document."""
        values: dict[str, Any] = {"status": status, "updated_at": func.now()}
        if metadata is not None:
            values["session_metadata"] = metadata

        async with self.session_factory() as session:
            await session.execute(
                update(SearchSessionModel).where(SearchSessionModel.id == session_id).values(**values)
            )
            await session.commit()
        logger.debug("Search session updated", session_id=session_id, status=status)

    async def save_web_source(
        self,
        session_id: str,
        source: ScrapedSource,
        summary: str,
        embedding: list[float] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        async with self.session_factory() as session:
            db_source = WebSourceModel(
                session_id=session_id,
                url=source.url,
                title=source.title,
                content=source.content,
                summary=summary,
                domain=source.domain,
                scraped_at=source.scraped_at,
                embedding=embedding,
                source_metadata=metadata or {},
            )
            session.add(db_source)
            await session.commit()
            return db_source.id

    async def save_report(
        self,
        session_id: str,
        title: str,
        content: str,
        filename: str | None = None,
        file_path: str | None = None,
        format: str = "markdown",
        metadata: dict[str, Any] | None = None,
    ) -> str:
        async with self.session_factory() as session:
            db_report = ReportModel(
                session_id=session_id,
                title=title[:500],
                content=content,
                filename=filename,
                file_path=file_path,
                format=format,
                report_metadata=metadata or {},
            )
            session.add(db_report)
            await session.commit()
            logger.info("Report saved", session_id=session_id, report_id=db_report.id)
            return db_report.id

    async def get_cached_embedding(self, content_hash: str) -> Optional[list[float]]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(EmbeddingCacheModel.embedding).where(EmbeddingCacheModel.content_hash == content_hash)
            )
            return _vector_to_list(result.scalar_one_or_none())

    async def cache_embedding(
        self, content_hash: str, content_preview: str, embedding: list[float], model_used: str
    ) -> None:
        """Upsert a cache entry; on conflict the vector and model are overwritten."""
        stmt = pg_insert(EmbeddingCacheModel).values(
            content_hash=content_hash,
            content_preview=content_preview[:500],
            embedding=embedding,
            model_used=model_used,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[EmbeddingCacheModel.content_hash],
            set_={
                "embedding": stmt.excluded.embedding,
                "model_used": stmt.excluded.model_used,
                "created_at": func.now(),
            },
        )
        async with self.session_factory() as session:
            await session.execute(stmt)
            await session.commit()
        logger.debug("Embedding cached", content_hash=content_hash)

    async def vector_search(
        self, embedding: list[float], limit: int = 10, threshold: float = 0.7
    ) -> list[VectorMatch]:
        """Web sources with cosine similarity at least ``threshold``, nearest first."""
        distance = WebSourceModel.embedding.cosine_distance(embedding)
        similarity = (1 - distance).label("similarity")
        stmt = (
            select(WebSourceModel, similarity)
            .where(WebSourceModel.embedding.is_not(None))
            .where(1 - distance >= threshold)
            .order_by(distance)
            .limit(limit)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            rows = result.all()

        logger.debug("Vector search completed", results_count=len(rows))
        return [
            VectorMatch(
                id=source.id,
                session_id=source.session_id,
                url=source.url,
                title=source.title,
                summary=source.summary,
                domain=source.domain,
                metadata=dict(source.source_metadata) if source.source_metadata else {},
                similarity=float(score),
            )
            for source, score in rows
        ]

    async def get_search_history(self, limit: int = 10, offset: int = 0) -> list[SessionSummary]:
        """Most recent sessions first, with source and report counts."""
        sources_count = (
            select(func.count(WebSourceModel.id))
            .where(WebSourceModel.session_id == SearchSessionModel.id)
            .correlate(SearchSessionModel)
            .scalar_subquery()
        )
        reports_count = (
            select(func.count(ReportModel.id))
            .where(ReportModel.session_id == SearchSessionModel.id)
            .correlate(SearchSessionModel)
            .scalar_subquery()
        )
        stmt = (
            select(SearchSessionModel, sources_count.label("sources_count"), reports_count.label("reports_count"))
            .order_by(SearchSessionModel.timestamp.desc())
            .limit(limit)
            .offset(offset)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            rows = result.all()

        return [
            SessionSummary(**db_session.to_dict(), sources_count=n_sources, reports_count=n_reports)
            for db_session, n_sources, n_reports in rows
        ]

    async def get_session_details(self, session_id: str) -> Optional[SessionDetails]:
        async with self.session_factory() as session:
            db_session = await session.get(SearchSessionModel, session_id)
            if db_session is None:
                return None

            sources = await session.execute(
                select(WebSourceModel)
                .where(WebSourceModel.session_id == session_id)
                .order_by(WebSourceModel.scraped_at)
            )
            reports = await session.execute(
                select(ReportModel)
                .where(ReportModel.session_id == session_id)
                .order_by(ReportModel.created_at)
            )

            return SessionDetails(
                session=SessionRecord(**db_session.to_dict()),
                sources=[WebSourceRecord(**row.to_dict()) for row in sources.scalars()],
                reports=[ReportRecord(**row.to_dict()) for row in reports.scalars()],
            )

    async def get_statistics(self) -> StoreStatistics:
        """Row counts per table and the ten most frequent source domains."""
        async with self.session_factory() as session:
            counts = (
                await session.execute(
                    select(
                        select(func.count()).select_from(SearchSessionModel).scalar_subquery(),
                        select(func.count()).select_from(WebSourceModel).scalar_subquery(),
                        select(func.count()).select_from(ReportModel).scalar_subquery(),
                        select(func.count()).select_from(EmbeddingCacheModel).scalar_subquery(),
                    )
                )
            ).one()

            domain_count = func.count(WebSourceModel.id).label("count")
            domains = await session.execute(
                select(WebSourceModel.domain, domain_count)
                .where(WebSourceModel.domain.is_not(None))
                .group_by(WebSourceModel.domain)
                .order_by(domain_count.desc())
                .limit(10)
            )

            return StoreStatistics(
                sessions=counts[0],
                sources=counts[1],
                reports=counts[2],
                cached_embeddings=counts[3],
                top_domains=[{"domain": domain, "count": count} for domain, count in domains.all()],
            )

    async def cleanup_old_data(self, days_old: int = 30) -> int:
        """Delete sessions (and their children) older than ``days_old`` days."""
        cutoff = utc_now() - timedelta(days=days_old)
        async with self.session_factory() as session:
            result = await session.execute(
                delete(SearchSessionModel).where(SearchSessionModel.created_at < cutoff)
            )
            await session.commit()

        removed = result.rowcount or 0
        logger.info("Old sessions removed", removed=removed, days_old=days_old)
        return removed

    async def health_check(self) -> dict[str, Any]:
        """Check connectivity and whether the vector extension is installed."""
        try:
            async with self.session_factory() as session:
                now = (await session.execute(text("SELECT NOW()"))).scalar_one()
                vector_enabled = (
                    await session.execute(
                        text("SELECT EXISTS(SELECT 1 FROM pg_extension WHERE extname = 'vector')")
                    )
                ).scalar_one()
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "error", "message": f"Connection error: {e}"}

        return {
            "status": "ok",
            "message": "Database connected",
            "timestamp": now.isoformat() if hasattr(now, "isoformat") else str(now),
            "vector_enabled": bool(vector_enabled),
        }
