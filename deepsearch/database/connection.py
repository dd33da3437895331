"""Database engine and session factory management."""

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from deepsearch.config.settings import Settings
from deepsearch.database.schema import Base

logger = structlog.get_logger(__name__)


class DatabaseManager:
    """Owns the async engine and hands out the session factory."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None

    async def init_engine(self) -> None:
        """Initialize SQLAlchemy async engine."""
        try:
            self.engine = create_database_engine(self.settings)
            self.session_factory = create_session_factory(self.engine)
            logger.info("SQLAlchemy engine initialized", pool_size=self.settings.database_pool_size)
        except Exception as e:
            logger.error("Failed to initialize SQLAlchemy engine", error=str(e))
            raise

    async def create_tables(self) -> None:
        """Create the vector extension and all tables if missing."""
        if self.engine is None:
            raise RuntimeError("Database engine not initialized")

        async with self.engine.begin() as conn:
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def close_engine(self) -> None:
        """Close SQLAlchemy engine."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("SQLAlchemy engine closed")


def create_database_engine(settings: Settings) -> AsyncEngine:
    """Create SQLAlchemy async engine."""
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.database_pool_size,
        max_overflow=10,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create SQLAlchemy session factory."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
