"""Abstract base class for movie metadata providers."""

from abc import ABC, abstractmethod

from cinefind.context import AppContext
from cinefind.models import DetailRecord, SearchPage


class Provider(ABC):
    """Base class for all metadata providers."""

    @classmethod
    @abstractmethod
    def from_context(cls, context: AppContext) -> "Provider":
        """Build the provider from the application context."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for display."""
        ...

    @abstractmethod
    async def search(self, query: str) -> SearchPage:
        """Search titles matching a free-text query."""
        ...

    @abstractmethod
    async def fetch_details(self, item_id: str) -> DetailRecord | None:
        """Fetch full details for one title, or None if the API has none."""
        ...
