"""Search provider and fetcher factories."""

from typing import Optional

import aiohttp
import structlog

from deepsearch.config.settings import Settings
from deepsearch.search.base import SearchProvider
from deepsearch.search.duckduckgo_provider import DuckDuckGoSearchProvider, QueryEngineConfig
from deepsearch.search.scraper import ContentFetcher, ScraperConfig

logger = structlog.get_logger(__name__)


def create_search_provider(
    settings: Settings, session: Optional[aiohttp.ClientSession] = None
) -> SearchProvider:
    """
    Create the search provider.

    Args:
        settings: Application settings
        session: Shared aiohttp session

    Returns:
        Configured SearchProvider instance
    """
    config = QueryEngineConfig.from_settings(settings)
    logger.info("Creating DuckDuckGoSearchProvider", region=config.region, safe_search=config.safe_search)
    return DuckDuckGoSearchProvider(config=config, session=session)


def create_content_fetcher(
    settings: Settings, session: Optional[aiohttp.ClientSession] = None
) -> ContentFetcher:
    return ContentFetcher(config=ScraperConfig.from_settings(settings), session=session)
