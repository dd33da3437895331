"""SQLAlchemy database models."""

import os
from typing import Any
from uuid import uuid4

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _get_embedding_dimension() -> int:
    """Embedding dimension used for the vector columns.

    Must match the dimension produced by the configured embedding provider.
    """
    env_dim = os.getenv("EMBEDDING_DIMENSION")
    if env_dim and env_dim.isdigit():
        return int(env_dim)

    from deepsearch.config.settings import get_settings

    return get_settings().embedding_dimension


EMBEDDING_DIMENSION = _get_embedding_dimension()


def _new_id() -> str:
    return str(uuid4())


class SearchSessionModel(Base):
    """One end-to-end deep search run."""

    __tablename__ = "search_sessions"

    id = Column(String(36), primary_key=True, default=_new_id)
    query = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    status = Column(String(50), nullable=False, default="pending", server_default="pending")
    session_metadata = Column("metadata", JSONB, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    sources = relationship("WebSourceModel", back_populates="session", cascade="all, delete-orphan", passive_deletes=True)
    reports = relationship("ReportModel", back_populates="session", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("idx_search_sessions_timestamp", "timestamp"),
        Index("idx_search_sessions_status", "status"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "timestamp": self.timestamp,
            "status": self.status,
            "metadata": dict(self.session_metadata) if self.session_metadata else {},
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class WebSourceModel(Base):
    """Scraped and analyzed web page."""

    __tablename__ = "web_sources"

    id = Column(String(36), primary_key=True, default=_new_id)
    session_id = Column(String(36), ForeignKey("search_sessions.id", ondelete="CASCADE"), nullable=False)
    url = Column(Text, nullable=False)
    title = Column(Text)
    content = Column(Text)
    summary = Column(Text)
    domain = Column(String(255))
    scraped_at = Column(DateTime(timezone=True), server_default=func.now())
    embedding = Column(Vector(EMBEDDING_DIMENSION))
    source_metadata = Column("metadata", JSONB, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    session = relationship("SearchSessionModel", back_populates="sources")

    __table_args__ = (
        Index("idx_web_sources_session_id", "session_id"),
        Index("idx_web_sources_domain", "domain"),
        Index(
            "idx_web_sources_embedding",
            "embedding",
            postgresql_using="ivfflat",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "summary": self.summary,
            "domain": self.domain,
            "scraped_at": self.scraped_at,
            "metadata": dict(self.source_metadata) if self.source_metadata else {},
        }


class ReportModel(Base):
    """Final report of a session. Never updated after insert."""

    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=_new_id)
    session_id = Column(String(36), ForeignKey("search_sessions.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    filename = Column(String(255))
    file_path = Column(Text)
    format = Column(String(20), nullable=False, default="markdown", server_default="markdown")
    report_metadata = Column("metadata", JSONB, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    session = relationship("SearchSessionModel", back_populates="reports")

    __table_args__ = (Index("idx_reports_session_id", "session_id"),)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "title": self.title,
            "content": self.content,
            "filename": self.filename,
            "file_path": self.file_path,
            "format": self.format,
            "metadata": dict(self.report_metadata) if self.report_metadata else {},
            "created_at": self.created_at,
        }


class EmbeddingCacheModel(Base):
    """Embedding vectors keyed by the MD5 of their input text."""

    __tablename__ = "embeddings_cache"

    id = Column(String(36), primary_key=True, default=_new_id)
    content_hash = Column(String(64), unique=True, nullable=False)
    content_preview = Column(Text)
    embedding = Column(Vector(EMBEDDING_DIMENSION))
    model_used = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index(
            "idx_embeddings_cache_embedding",
            "embedding",
            postgresql_using="ivfflat",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )
