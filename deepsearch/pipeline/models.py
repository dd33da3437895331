"""Pipeline data models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from deepsearch.analysis.schemas import SourceAnalysis
from deepsearch.database.models import VectorMatch
from deepsearch.search.models import RetrievalResult, ScrapedSource


class RunStage(str, Enum):
    """Stages of one deep search run."""

    CREATED = "created"
    TERMS_GENERATED = "terms_generated"
    WEB_SEARCHED = "web_searched"
    ANALYZED = "analyzed"
    REPORTED = "reported"
    COMPLETED = "completed"
    ERROR = "error"


class DeepSearchOptions(BaseModel):
    """Options for one deep search run."""

    use_advanced_search: bool = Field(default=True, description="Run dork variants on the first term")
    generate_embeddings: bool = Field(default=True, description="Embed relevant sources")
    max_sources: Optional[int] = Field(default=None, ge=1, description="Result budget, defaults to settings")
    save_to_database: bool = Field(default=True, description="Persist session, sources and report")


class AnalyzedSource(BaseModel):
    """A scraped source with its model analysis."""

    source: ScrapedSource
    analysis: SourceAnalysis
    embedding: Optional[list[float]] = Field(default=None, repr=False)
    content_hash: Optional[str] = None
    embedding_cached: bool = False


class RankedItem(BaseModel):
    item: str
    count: int


class SourceDigest(BaseModel):
    url: str
    domain: str
    title: str
    relevance: int
    credibility: int
    summary: str


class ConsolidatedSynthesis(BaseModel):
    """Frequency aggregation over all successful analyses."""

    query: str
    total_sources: int
    high_relevance_sources: int
    medium_relevance_sources: int
    low_relevance_sources: int
    top_key_points: list[RankedItem] = Field(default_factory=list)
    top_insights: list[RankedItem] = Field(default_factory=list)
    top_topics: list[RankedItem] = Field(default_factory=list)
    sources: list[SourceDigest] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    individual_analyses: list[AnalyzedSource] = Field(default_factory=list)
    consolidated: ConsolidatedSynthesis
    total_sources: int
    successful_analyses: int


class Report(BaseModel):
    """Final report. Immutable once created."""

    model_config = {"frozen": True}

    title: str
    content: str
    filename: str
    file_path: Optional[str] = None
    format: str = "markdown"
    query: str
    timestamp: datetime
    source_count: int
    successful_analyses: int


class DeepSearchResult(BaseModel):
    session_id: Optional[str] = None
    query: str
    search_terms: list[str]
    categories: list[str] = Field(default_factory=list)
    web_results: RetrievalResult
    analysis: AnalysisResult
    report: Report


class VectorSearchResult(BaseModel):
    query: str
    results: list[VectorMatch] = Field(default_factory=list)
    total_found: int = 0
