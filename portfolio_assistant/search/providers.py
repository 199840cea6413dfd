"""
Result providers - Asynchronous sources of search matches and holdings.

Providers are black boxes to the assistant: each exposes one coroutine and
may fail with any exception. The orchestrator and the holdings cache decide
what a failure means. Plain async functions can be plugged in through the
Callable* adapters.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Iterable


class SearchProvider(ABC):
    """Base class for search result providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (used in logs)."""
        ...

    @abstractmethod
    async def search(self, term: str):
        """
        Return matches for term.

        The primary provider answers with a SearchResultSet or an equivalent
        mapping; the auxiliary provider's answer is partial results.
        """
        ...


class HoldingsProvider(ABC):
    """Base class for the holdings source."""

    @abstractmethod
    async def fetch_holdings(self, range: str) -> Iterable:
        """Return the user's holdings for the given date range code."""
        ...


class CallableSearchProvider(SearchProvider):
    """Adapt an async function term -> results to SearchProvider."""

    def __init__(self, name: str, fn: Callable[[str], Awaitable]):
        self._name = name
        self._fn = fn

    @property
    def name(self) -> str:
        return self._name

    async def search(self, term: str):
        return await self._fn(term)


class CallableHoldingsProvider(HoldingsProvider):
    """Adapt an async function range -> holdings to HoldingsProvider."""

    def __init__(self, fn: Callable[[str], Awaitable[Iterable]]):
        self._fn = fn

    async def fetch_holdings(self, range: str) -> Iterable:
        return await self._fn(range)
