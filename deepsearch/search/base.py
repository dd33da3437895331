"""Base search provider interface."""

from abc import ABC, abstractmethod

from deepsearch.search.models import SearchHit


class SearchProvider(ABC):
    """Abstract base class for search providers."""

    name: str = "search"

    @abstractmethod
    async def search(
        self,
        query: str,
        max_results: int = 10,
        region: str | None = None,
        safe_search: str | None = None,
    ) -> list[SearchHit]:
        """
        Search the web for a query.

        Implementations return an empty list on provider errors instead of
        raising.

        Args:
            query: Search query string
            max_results: Maximum number of results to return
            region: Provider locale override
            safe_search: Safe search level override

        Returns:
            Organic hits in provider order
        """
        pass
