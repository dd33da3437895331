"""DuckDuckGo HTML search provider implementation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import aiohttp
import structlog
from bs4 import BeautifulSoup

from deepsearch.config.settings import Settings
from deepsearch.search.base import SearchProvider
from deepsearch.search.http import client_session
from deepsearch.search.models import SearchHit
from deepsearch.search.urls import unwrap_redirect

logger = structlog.get_logger(__name__)

DUCKDUCKGO_HTML_URL = "https://html.duckduckgo.com/html/"

# DuckDuckGo "kp" parameter
SAFE_SEARCH_LEVELS = {"strict": "1", "moderate": "-1", "off": "-2"}


@dataclass
class QueryEngineConfig:
    """Options recognized by the DuckDuckGo provider."""

    base_url: str = DUCKDUCKGO_HTML_URL
    region: str = "br-pt"
    safe_search: str = "moderate"
    timeout: float = 30.0
    user_agent: str = "DeepSearch Bot 1.0"

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueryEngineConfig":
        return cls(
            region=settings.duckduckgo_region,
            safe_search=settings.duckduckgo_safe_search,
            timeout=settings.search_timeout,
            user_agent=settings.user_agent,
        )


class DuckDuckGoSearchProvider(SearchProvider):
    """Scrapes the DuckDuckGo HTML endpoint for organic results."""

    name = "duckduckgo"

    def __init__(
        self,
        config: QueryEngineConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize DuckDuckGo provider.

        Args:
            config: Provider options
            session: Shared aiohttp session; a session per request is used if omitted
        """
        self.config = config or QueryEngineConfig()
        self.timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        self.headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
            "DNT": "1",
        }
        self._session = session

    def _build_params(self, query: str, region: str | None, safe_search: str | None) -> dict[str, str]:
        level = safe_search or self.config.safe_search
        return {
            "q": query,
            "kl": region or self.config.region,
            "kp": SAFE_SEARCH_LEVELS.get(level, SAFE_SEARCH_LEVELS["moderate"]),
        }

    async def search(
        self,
        query: str,
        max_results: int = 10,
        region: str | None = None,
        safe_search: str | None = None,
    ) -> list[SearchHit]:
        """
        Search using the DuckDuckGo HTML page.

        Args:
            query: Search query
            max_results: Maximum results
            region: Region override (``kl``)
            safe_search: strict, moderate or off

        Returns:
            Organic hits, at most ``max_results``
        """
        if max_results <= 0:
            return []

        params = self._build_params(query, region, safe_search)
        logger.info("DuckDuckGo search request", query=query, max_results=max_results)

        try:
            async with client_session(self._session, self.timeout, self.headers) as session:
                async with session.get(
                    self.config.base_url, params=params, headers=self.headers, timeout=self.timeout
                ) as response:
                    if response.status != 200:
                        logger.warning(
                            "DuckDuckGo returned non-200 status",
                            status=response.status,
                            query=query,
                        )
                        return []
                    html = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("DuckDuckGo search failed - connection error", error=str(e), query=query)
            return []

        hits = parse_results(html)[:max_results]
        logger.info("DuckDuckGo search completed", query=query, results_count=len(hits))
        return hits


def parse_results(html: str) -> list[SearchHit]:
    """Parse organic results from a DuckDuckGo HTML result page."""
    soup = BeautifulSoup(html, "html.parser")
    hits: list[SearchHit] = []

    for block in soup.select(".result"):
        classes = block.get("class") or []
        if "result--ad" in classes:
            continue

        link = block.select_one(".result__title a") or block.select_one("a.result__a")
        if link is None:
            continue

        title = link.get_text(" ", strip=True)
        href = link.get("href") or ""
        if not title or not href:
            continue

        url = unwrap_redirect(href)
        # Ad clicks go through y.js even when the block is not flagged
        if "duckduckgo.com/y.js" in url:
            continue

        snippet_node = block.select_one(".result__snippet")
        snippet = snippet_node.get_text(" ", strip=True) if snippet_node else ""

        hits.append(SearchHit(url=url, title=title, snippet=snippet, source="duckduckgo"))

    return hits
