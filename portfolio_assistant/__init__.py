# Portfolio Assistant Package
"""
Command-palette assistant for a portfolio application.

Components:
  - Search orchestrator: debounced, latest-wins dispatch to result providers
  - Focus navigator: keyboard cursor over the rendered result rows
  - Filter state: account / asset class / tag / holding and date range
  - Holdings cache: holding list loaded once and kept sorted
"""

from .panels.assistant import AssistantPanel
from .search.orchestrator import SearchOrchestrator

__version__ = "0.1.0-dev"

__all__ = ["AssistantPanel", "SearchOrchestrator"]
