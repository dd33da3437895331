"""Search and scraping result models."""

from datetime import datetime

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """Single organic search result."""

    url: str = Field(..., description="Destination URL (redirect wrappers removed)")
    title: str = Field(..., description="Result title")
    snippet: str = Field(default="", description="Result snippet")
    search_term: str = Field(default="", description="Search term that produced the hit")
    dork: str | None = Field(default=None, description="Query refinement variant, if any")
    source: str = Field(default="duckduckgo", description="Search provider name")


class ScrapedSource(BaseModel):
    """Content extracted from one fetched page."""

    url: str = Field(..., description="Page URL")
    domain: str = Field(..., description="Host name")
    title: str = Field(default="", description="Page title")
    description: str = Field(default="", description="Meta description")
    content: str = Field(..., description="Normalized main content text")
    word_count: int = Field(default=0, description="Number of words in content")
    content_length: int = Field(default=0, description="Number of characters in content")
    scraped_at: datetime = Field(..., description="Fetch time")
    search_term: str = Field(default="", description="Search term that produced the page")
    dork: str | None = Field(default=None, description="Query refinement variant, if any")


class DomainCount(BaseModel):
    """Number of sources from one domain."""

    domain: str
    count: int


class SearchStats(BaseModel):
    """Aggregate statistics over scraped sources."""

    total_results: int = 0
    domains: dict[str, int] = Field(default_factory=dict)
    top_domains: list[DomainCount] = Field(default_factory=list)
    average_content_length: int = 0
    total_content_length: int = 0
    total_words: int = 0


class SearchTermsExpansion(BaseModel):
    """Search terms derived from a natural-language query."""

    original_query: str
    search_terms: list[str] = Field(..., min_length=1)
    categories: list[str] = Field(default_factory=list)

    @classmethod
    def single(cls, query: str) -> "SearchTermsExpansion":
        """Trivial expansion used when the model cannot expand the query."""
        return cls(original_query=query, search_terms=[query], categories=["general"])


class RetrievalResult(BaseModel):
    """Output of the web search phase."""

    search_terms: list[str]
    sources: list[ScrapedSource] = Field(default_factory=list)
    stats: SearchStats = Field(default_factory=SearchStats)
