# Portfolio Assistant Services Package
"""
Backend services for the assistant.

Services hold state that outlives a single render: the holdings cache and
the filter form.
"""

from .filters import FilterStateManager, FilterSelection, FilterType
from .holdings import Holding, HoldingsCache
from .user import Permissions, User

__all__ = [
    "FilterStateManager",
    "FilterSelection",
    "FilterType",
    "Holding",
    "HoldingsCache",
    "Permissions",
    "User",
]
