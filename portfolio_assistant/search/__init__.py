"""
Search package - Query orchestration and provider framework.

Raw query input flows through the SearchOrchestrator, which debounces it
and dispatches to the primary (and, for admins, auxiliary) provider.
"""

from .models import AssetProfileHit, HoldingHit, SearchHit, SearchResultSet
from .orchestrator import SearchOrchestrator
from .providers import (
    CallableHoldingsProvider,
    CallableSearchProvider,
    HoldingsProvider,
    SearchProvider,
)

__all__ = [
    "AssetProfileHit",
    "HoldingHit",
    "SearchHit",
    "SearchResultSet",
    "SearchOrchestrator",
    "SearchProvider",
    "HoldingsProvider",
    "CallableSearchProvider",
    "CallableHoldingsProvider",
]
