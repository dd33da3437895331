"""Mock objects for testing."""

from tests.mocks.mock_fetcher import MockFetcher, make_source
from tests.mocks.mock_http import MockClientSession
from tests.mocks.mock_llm import MockChatModel, ScriptedAnalysisService
from tests.mocks.mock_search import MockSearchProvider
from tests.mocks.mock_store import InMemorySessionStore

__all__ = [
    "MockChatModel",
    "ScriptedAnalysisService",
    "MockSearchProvider",
    "MockFetcher",
    "make_source",
    "InMemorySessionStore",
    "MockClientSession",
]
