"""Search source adapter abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod

from article_search.models import NormalizedResult, Provider, SearchPage, SearchQuery


class SearchSource(ABC):
    """Abstract base class for bibliographic data sources.

    Each source adapter translates a SearchQuery into the specific
    API's request and normalizes the response into NormalizedResult
    objects.
    """

    #: Every entry this source returns carries a publication date.
    always_dated: bool = False

    @property
    @abstractmethod
    def provider(self) -> Provider:
        """Provider served by this source."""
        ...

    @property
    def source_name(self) -> str:
        return self.provider.value

    @abstractmethod
    async def search(self, query: SearchQuery) -> SearchPage:
        """Run one search request."""
        ...

    @abstractmethod
    async def get_by_id(self, item_id: str) -> NormalizedResult | None:
        """Fetch a single record; None when the provider does not know it."""
        ...

    async def aclose(self) -> None:
        """Release network resources held by the source."""
