"""
Holdings Cache - The user's holdings, loaded once and kept sorted.

The list is fetched a single time per widget lifetime (with the maximal
date range) and stored sorted by case-insensitive name. After a successful
load it never changes. It feeds the holding filter and its picker, which
narrows the list with rapidfuzz fuzzy matching.
"""

import asyncio
from dataclasses import dataclass
from typing import Mapping, Optional

from gi.repository import GObject
from loguru import logger
from rapidfuzz import fuzz, process, utils

from ..search.models import SearchHit
from ..search.providers import HoldingsProvider

DEFAULT_RANGE = "max"


@dataclass(frozen=True)
class Holding(SearchHit):
    """A position the user owns."""

    @classmethod
    def coerce(cls, value) -> "Holding":
        if isinstance(value, cls):
            return value
        if isinstance(value, SearchHit):
            return cls(
                symbol=value.symbol,
                name=value.name,
                data_source=value.data_source,
                asset_class=value.asset_class,
                asset_sub_class=value.asset_sub_class,
                currency=value.currency,
            )
        return cls.from_mapping(value)


class HoldingsCache(GObject.Object):
    """
    Lazily loaded, immutable, name-sorted holding list.

    Signals:
        changed: Emitted once, after the holdings have been loaded

    Methods:
        load(provider, range): Fetch holdings unless already loaded
        match(query, limit): Fuzzy-narrow holdings for a picker
    """

    __gtype_name__ = "HoldingsCache"

    __gsignals__ = {
        "changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, fuzzy_threshold: int = 50):
        super().__init__()
        self.fuzzy_threshold = fuzzy_threshold
        self._holdings: Optional[tuple[Holding, ...]] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def holdings(self) -> tuple[Holding, ...]:
        """Cached holdings; empty until loaded."""
        return self._holdings or ()

    @property
    def is_loaded(self) -> bool:
        return self._holdings is not None

    async def load(self, provider: HoldingsProvider, range: str = DEFAULT_RANGE) -> tuple[Holding, ...]:
        """
        Fetch and cache the holdings.

        Concurrent callers share one fetch; once loaded, the provider is not
        called again. Provider errors propagate and leave the cache unloaded.

        Args:
            provider: Source of holdings
            range: Date range code passed to the provider

        Returns:
            The cached holdings, sorted by case-insensitive name
        """
        if self._holdings is None:
            if self._pending is None:
                self._pending = asyncio.ensure_future(self._fetch(provider, range))
            try:
                await self._pending
            finally:
                self._pending = None
        return self._holdings

    async def _fetch(self, provider: HoldingsProvider, range: str) -> None:
        answer = await provider.fetch_holdings(range)

        # The portfolio endpoint wraps the list: {"holdings": [...]}
        if isinstance(answer, Mapping):
            answer = answer.get("holdings", [])

        holdings = sorted(
            (Holding.coerce(item) for item in answer),
            key=lambda holding: holding.name.casefold(),
        )
        self._holdings = tuple(holdings)
        logger.debug(f"Loaded {len(self._holdings)} holdings (range={range})")

        self.emit("changed")

    def match(self, query: str, limit: int = 10) -> list[Holding]:
        """
        Narrow holdings by fuzzy matching name and symbol.

        Args:
            query: Text typed into the holding picker
            limit: Maximum number of holdings to return

        Returns:
            Best matches first; for an empty query the first holdings in
            name order
        """
        holdings = self.holdings
        if not query or not query.strip():
            return list(holdings[:limit])

        choices = {
            index: f"{holding.name} {holding.symbol}"
            for index, holding in enumerate(holdings)
        }
        matches = process.extract(
            query,
            choices,
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            limit=limit,
            score_cutoff=self.fuzzy_threshold,
        )

        # matches: list of (matched_string, score, key)
        return [holdings[index] for _matched, _score, index in matches]
