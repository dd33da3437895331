"""Mock aiohttp session for testing."""

from typing import Any


class MockResponse:
    def __init__(self, payload: Any, status: int = 200):
        self.payload = payload
        self.status = status

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise RuntimeError(f"HTTP {self.status}")

    async def json(self) -> Any:
        return self.payload


class MockClientSession:
    """Records requests and answers each with a canned JSON payload."""

    def __init__(self, payload: Any):
        self.payload = payload
        self.requests: list[tuple[str, str, dict]] = []
        self.closed = False

    def get(self, url: str, **kwargs) -> MockResponse:
        self.requests.append(("GET", url, kwargs))
        return MockResponse(self.payload)

    def post(self, url: str, **kwargs) -> MockResponse:
        self.requests.append(("POST", url, kwargs))
        return MockResponse(self.payload)
