"""Records returned by the session store."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class SessionRecord(BaseModel):
    id: str
    query: str
    status: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionSummary(SessionRecord):
    """History row with child counts."""

    sources_count: int = 0
    reports_count: int = 0


class WebSourceRecord(BaseModel):
    id: str
    session_id: str
    url: str
    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    domain: Optional[str] = None
    scraped_at: Optional[datetime] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ReportRecord(BaseModel):
    id: str
    session_id: str
    title: str
    content: str
    filename: Optional[str] = None
    file_path: Optional[str] = None
    format: str = "markdown"
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class SessionDetails(BaseModel):
    """A session with its sources and reports."""

    session: SessionRecord
    sources: list[WebSourceRecord] = Field(default_factory=list)
    reports: list[ReportRecord] = Field(default_factory=list)


class VectorMatch(BaseModel):
    """Web source ranked by cosine similarity to a query embedding."""

    id: str
    session_id: str
    url: str
    title: Optional[str] = None
    summary: Optional[str] = None
    domain: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    similarity: float


class StoreStatistics(BaseModel):
    sessions: int = 0
    sources: int = 0
    reports: int = 0
    cached_embeddings: int = 0
    top_domains: list[dict[str, Any]] = Field(default_factory=list)
