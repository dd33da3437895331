"""Tests for main-content extraction."""

import pytest

from deepsearch.search.models import SearchHit
from deepsearch.search.scraper import ContentFetcher, parse_html

ARTICLE = " ".join(["Python is a programming language that lets you work quickly."] * 5)


def test_parse_html_prefers_main_content():
    html = f"""
    <html><head>
      <title>  Python
        Guide </title>
      <meta name="description" content="A short   guide">
    </head><body>
      <nav>Home | About | Contact</nav>
      <script>var tracking = 1;</script>
      <article>{ARTICLE}</article>
      <footer>Copyright</footer>
    </body></html>
    """

    page = parse_html(html)

    assert page is not None
    assert page.title == "Python Guide"
    assert page.description == "A short guide"
    assert page.content == ARTICLE
    assert "tracking" not in page.content
    assert "Copyright" not in page.content


def test_parse_html_falls_back_to_body():
    html = f"<html><body><div><p>{ARTICLE}</p></div><footer>Footer</footer></body></html>"

    page = parse_html(html)

    assert page is not None
    assert page.content == ARTICLE
    assert page.title == ""


def test_parse_html_rejects_thin_pages():
    assert parse_html("<html><body><main>Too short to be useful.</main></body></html>") is None


def test_parse_html_truncates_content():
    page = parse_html(f"<html><body><main>{ARTICLE}</main></body></html>", max_content_length=120)

    assert page is not None
    assert len(page.content) == 120


def test_parse_html_title_with_nested_markup():
    page = parse_html(f"<html><head><title>Hello <b>World</b></title></head><body><main>{ARTICLE}</main></body></html>")

    assert page is not None
    assert page.title == "Hello World"


class StaticFetcher(ContentFetcher):
    def __init__(self, html):
        super().__init__()
        self.html = html

    async def _download(self, url):
        return self.html


@pytest.mark.asyncio
async def test_fetch_falls_back_to_hit_title():
    fetcher = StaticFetcher(f"<html><body><article>{ARTICLE}</article></body></html>")
    hit = SearchHit(url="https://example.com/py", title="Python from the results page", search_term="python")

    source = await fetcher.fetch(hit)

    assert source.title == "Python from the results page"
    assert source.search_term == "python"
    assert source.domain == "example.com"


@pytest.mark.asyncio
async def test_fetch_prefers_page_title():
    fetcher = StaticFetcher(f"<html><head><title>Page title</title></head><body><article>{ARTICLE}</article></body></html>")

    source = await fetcher.fetch(SearchHit(url="https://example.com/py", title="Hit title"))

    assert source.title == "Page title"
