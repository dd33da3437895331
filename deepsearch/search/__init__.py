"""Web search, scraping and retrieval coordination."""

from deepsearch.search.base import SearchProvider
from deepsearch.search.coordinator import RetrievalConfig, RetrievalCoordinator
from deepsearch.search.duckduckgo_provider import DuckDuckGoSearchProvider, QueryEngineConfig
from deepsearch.search.factory import create_content_fetcher, create_search_provider
from deepsearch.search.models import RetrievalResult, ScrapedSource, SearchHit, SearchStats, SearchTermsExpansion
from deepsearch.search.scraper import ContentFetcher, ScraperConfig
from deepsearch.search.throttle import RequestThrottle
from deepsearch.search.urls import DomainFilter, canonical_url

__all__ = [
    "SearchProvider",
    "DuckDuckGoSearchProvider",
    "QueryEngineConfig",
    "ContentFetcher",
    "ScraperConfig",
    "RetrievalCoordinator",
    "RetrievalConfig",
    "RequestThrottle",
    "DomainFilter",
    "canonical_url",
    "create_search_provider",
    "create_content_fetcher",
    # Models
    "SearchHit",
    "ScrapedSource",
    "SearchStats",
    "SearchTermsExpansion",
    "RetrievalResult",
]
