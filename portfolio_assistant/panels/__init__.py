# Portfolio Assistant Panels Package
"""
Widget-level logic for the assistant.

The panel owns the search input, the result rows and the filter form;
the navigator drives keyboard focus over the rows.
"""

from .assistant import AssistantPanel, ResultRow
from .navigation import FocusNavigator, KeyEvent

__all__ = ["AssistantPanel", "ResultRow", "FocusNavigator", "KeyEvent"]
