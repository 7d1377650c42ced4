"""Abstract base classes for external data providers.

Providers are the only fallible parts of the terminal. Implementations
catch their own errors and degrade to a documented fallback instead of
raising, so the registry and ledger never see a provider failure.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Analysis, Instrument, NewsItem, Quote


class QuoteProvider(ABC):
    """Source of bulk quotes and single-instrument lookups."""

    @abstractmethod
    async def fetch_quotes(self, symbols: list[str]) -> Optional[dict[str, Quote]]:
        """Fetch the latest quotes for the given symbols.

        Args:
            symbols: Canonical symbols currently on the watch-list.

        Returns:
            Dictionary mapping symbols to quotes, or None if the fetch failed
            or returned data that could not be parsed.
        """
        pass

    @abstractmethod
    async def lookup(self, query: str) -> Optional[Instrument]:
        """Resolve a free-text query to an instrument (history not yet filled).

        Returns:
            The Instrument, or None if nothing matched or the lookup failed.
        """
        pass

    async def close(self) -> None:
        """Clean up resources (browser, connections, etc.)."""
        pass


class AnalysisProvider(ABC):
    """Source of free-text commentary on a single instrument."""

    @abstractmethod
    async def analyze(self, instrument: Instrument) -> Analysis:
        """Analyze an instrument. Returns a NEUTRAL placeholder on failure."""
        pass

    async def close(self) -> None:
        pass


class NewsProvider(ABC):
    """Source of market headlines."""

    @abstractmethod
    async def fetch_news(self) -> NewsItem:
        """Fetch headlines. Returns an error placeholder with no sources on failure."""
        pass

    async def close(self) -> None:
        pass
