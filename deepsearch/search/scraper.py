"""Page fetching and main-content extraction."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog
from bs4 import BeautifulSoup

from deepsearch.config.settings import Settings
from deepsearch.search.http import client_session
from deepsearch.search.models import ScrapedSource, SearchHit
from deepsearch.search.urls import extract_domain
from deepsearch.utils.date import utc_now
from deepsearch.utils.text import clean_text

logger = structlog.get_logger(__name__)

NOISE_SELECTORS = "script, style, nav, footer, header, aside, noscript, .ads, .advertisement"

CONTENT_SELECTORS = (
    "article",
    '[role="main"]',
    ".content",
    ".post-content",
    ".entry-content",
    "main",
    "#content",
    ".main-content",
)

MIN_CONTENT_LENGTH = 100
MAX_TITLE_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 1000


@dataclass
class ScraperConfig:
    """Content fetcher options."""

    timeout: float = 30.0
    user_agent: str = "DeepSearch Bot 1.0"
    max_redirects: int = 5
    max_content_length: int = 50000

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScraperConfig":
        return cls(
            timeout=settings.search_timeout,
            user_agent=settings.user_agent,
            max_content_length=settings.max_content_length,
        )


@dataclass
class ExtractedPage:
    title: str
    description: str
    content: str


class ContentFetcher:
    """Fetches one page per URL and extracts its readable text."""

    def __init__(
        self,
        config: ScraperConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize content fetcher.

        Args:
            config: Fetcher options
            session: Shared aiohttp session; a session per request is used if omitted
        """
        self.config = config or ScraperConfig()
        self.timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        self.headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
        }
        self._session = session

    async def fetch(self, target: SearchHit | str) -> Optional[ScrapedSource]:
        """
        Fetch a page and build a scraped source from it.

        Args:
            target: Search hit or plain URL

        Returns:
            ScrapedSource, or None when the page is unreachable or too thin
        """
        if isinstance(target, SearchHit):
            url, search_term, dork, hit_title = target.url, target.search_term, target.dork, target.title
        else:
            url, search_term, dork, hit_title = target, "", None, ""

        try:
            html = await self._download(url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Page fetch failed", error=str(e), url=url)
            return None

        if html is None:
            return None

        page = parse_html(html, self.config.max_content_length)
        if page is None:
            logger.debug("Page content too short", url=url)
            return None

        content = page.content
        source = ScrapedSource(
            url=url,
            domain=extract_domain(url),
            title=page.title or hit_title[:MAX_TITLE_LENGTH],
            description=page.description,
            content=content,
            word_count=len(content.split()),
            content_length=len(content),
            scraped_at=utc_now(),
            search_term=search_term,
            dork=dork,
        )
        logger.info("Page scraped", url=url, content_length=source.content_length)
        return source

    async def _download(self, url: str) -> Optional[str]:
        async with client_session(self._session, self.timeout, self.headers) as session:
            async with session.get(
                url,
                headers=self.headers,
                timeout=self.timeout,
                allow_redirects=True,
                max_redirects=self.config.max_redirects,
            ) as response:
                if response.status >= 400:
                    logger.warning("Page fetch rejected", status=response.status, url=url)
                    return None
                return await response.text(errors="replace")


def parse_html(html: str, max_content_length: int = 50000) -> Optional[ExtractedPage]:
    """
    Extract title, description and main text from an HTML document.

    Returns None when the normalized content is shorter than 100 characters.
    """
    soup = BeautifulSoup(html, "html.parser")

    title = ""
    if soup.title is not None:
        title = clean_text(soup.title.get_text(" "))[:MAX_TITLE_LENGTH]

    description = ""
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and meta.get("content"):
        description = clean_text(meta["content"])[:MAX_DESCRIPTION_LENGTH]

    for element in soup.select(NOISE_SELECTORS):
        element.decompose()

    content = _main_text(soup)
    if len(content) < MIN_CONTENT_LENGTH and soup.body is not None:
        content = clean_text(soup.body.get_text(" "))

    content = content[:max_content_length]
    if len(content) < MIN_CONTENT_LENGTH:
        return None

    return ExtractedPage(title=title, description=description, content=content)


def _main_text(soup: BeautifulSoup) -> str:
    best = ""
    for selector in CONTENT_SELECTORS:
        matches = soup.select(selector)
        if not matches:
            continue
        text = clean_text(" ".join(node.get_text(" ") for node in matches))
        if len(text) > len(best):
            best = text
    return best
