"""
Search data model - hits and result sets returned by providers.

Providers may answer with these dataclasses directly or with plain
mappings (camelCase keys as sent by the API, or snake_case); coerce()
normalises both.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _pick(data: Mapping, *keys: str, default: Any = None) -> Any:
    """Return the first present key's value from data."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class SearchHit:
    """A single matched entity (asset profile or holding)."""
    symbol: str
    name: str = ""
    data_source: Optional[str] = None
    asset_class: Optional[str] = None
    asset_sub_class: Optional[str] = None
    currency: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping):
        return cls(
            symbol=_pick(data, "symbol", default=""),
            name=_pick(data, "name", default=""),
            data_source=_pick(data, "dataSource", "data_source"),
            asset_class=_pick(data, "assetClass", "asset_class"),
            asset_sub_class=_pick(data, "assetSubClass", "asset_sub_class"),
            currency=_pick(data, "currency"),
        )

    @property
    def key(self) -> tuple[Optional[str], str]:
        """Identity of the hit across providers."""
        return self.data_source, self.symbol


@dataclass(frozen=True)
class AssetProfileHit(SearchHit):
    """Asset profile match (market data entity)."""


@dataclass(frozen=True)
class HoldingHit(SearchHit):
    """Holding match (position the user owns)."""


@dataclass(frozen=True)
class SearchResultSet:
    """
    Results of one dispatch, in provider return order.

    The canonical empty set is SearchResultSet.empty(); an empty query and
    every failed dispatch resolve to it.
    """
    asset_profiles: tuple[AssetProfileHit, ...] = field(default_factory=tuple)
    holdings: tuple[HoldingHit, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "SearchResultSet":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.asset_profiles and not self.holdings

    def hits(self) -> list[SearchHit]:
        """All hits in display order: asset profiles first, then holdings."""
        return [*self.asset_profiles, *self.holdings]

    def with_asset_profiles_first(self, extra) -> "SearchResultSet":
        """
        Prepend asset profiles not already present (matched by key).

        Args:
            extra: Iterable of AssetProfileHit to put ahead of ours

        Returns:
            New SearchResultSet; self is left untouched
        """
        known = {hit.key for hit in self.asset_profiles}
        merged = []
        for hit in extra:
            if hit.key not in known:
                known.add(hit.key)
                merged.append(hit)
        return SearchResultSet(
            asset_profiles=(*merged, *self.asset_profiles),
            holdings=self.holdings,
        )

    @classmethod
    def coerce(cls, value) -> "SearchResultSet":
        """
        Build a SearchResultSet from a provider answer.

        Accepts a SearchResultSet, a mapping with assetProfiles/holdings
        (or asset_profiles/holdings) lists, or None (treated as empty).

        Raises:
            TypeError: If value has any other shape
        """
        if value is None:
            return cls.empty()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Unsupported search result type: {type(value).__name__}")

        profiles = _pick(value, "assetProfiles", "asset_profiles", default=[])
        holdings = _pick(value, "holdings", default=[])
        return cls(
            asset_profiles=tuple(_coerce_hit(AssetProfileHit, item) for item in profiles),
            holdings=tuple(_coerce_hit(HoldingHit, item) for item in holdings),
        )


def _coerce_hit(hit_type, item):
    if isinstance(item, hit_type):
        return item
    if isinstance(item, SearchHit):
        return hit_type(
            symbol=item.symbol,
            name=item.name,
            data_source=item.data_source,
            asset_class=item.asset_class,
            asset_sub_class=item.asset_sub_class,
            currency=item.currency,
        )
    return hit_type.from_mapping(item)
