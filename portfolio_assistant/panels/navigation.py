"""
Focus Navigator - Keyboard cursor over the rendered result rows.

The navigator knows nothing about rendering: it holds the current list of
focusable rows and the active index, and tells rows to take or drop focus,
scroll into view, or activate.

Key handling:
  - ArrowDown / ArrowUp: move the active row by one (clamped at the edges
    unless wrap is enabled), then scroll it into centered view
  - Enter: activate the active row and stop the event's propagation
  - With no active row, the first row is used
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from loguru import logger

ARROW_DOWN = "ArrowDown"
ARROW_UP = "ArrowUp"
ENTER = "Enter"


@dataclass
class KeyEvent:
    """A key press as delivered by the host."""
    key: str
    propagation_stopped: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class FocusableItem(Protocol):
    """A rendered row the navigator can drive."""

    def activate(self) -> None:
        """Select the row, as if clicked."""
        ...

    def scroll_into_view(self, smooth: bool = True, center: bool = True) -> None:
        ...

    def set_focus(self) -> None:
        ...

    def remove_focus(self) -> None:
        ...


class FocusNavigator:
    """
    Single-selection cursor: idle (no active row) or active at an index.

    Args:
        wrap: Cycle past the first/last row instead of stopping there
    """

    def __init__(self, wrap: bool = False):
        self.wrap = wrap
        self._items: list[FocusableItem] = []
        self._active_index = -1  # -1 means idle

    @property
    def items(self) -> tuple[FocusableItem, ...]:
        return tuple(self._items)

    @property
    def active_index(self) -> Optional[int]:
        return self._active_index if self._active_index >= 0 else None

    @property
    def active_item(self) -> Optional[FocusableItem]:
        if self._active_index < 0:
            return None
        return self._items[self._active_index]

    def set_items(self, items: Sequence[FocusableItem]) -> None:
        """Replace the rows (after a re-render); returns to idle."""
        self._clear_focus()
        self._items = list(items)
        self._active_index = -1

    def reset(self) -> None:
        self._clear_focus()
        self._active_index = -1

    def on_keydown(self, event: KeyEvent) -> bool:
        """
        Process a key press.

        Returns:
            True if the key was handled
        """
        if event.key in (ARROW_DOWN, ARROW_UP):
            if not self._items:
                return False

            self._clear_focus()
            self._move(1 if event.key == ARROW_DOWN else -1)

            item = self.current_item()
            item.set_focus()
            item.scroll_into_view(smooth=True, center=True)
            return True

        elif event.key == ENTER:
            item = self.current_item()
            if item is None:
                return False

            item.set_focus()
            logger.debug(f"Activating row {self._active_index}")
            item.activate()
            event.stop_propagation()
            return True

        return False

    def current_item(self) -> Optional[FocusableItem]:
        """Active row, making the first row active if none is."""
        if not self._items:
            return None
        if self._active_index < 0:
            self._active_index = 0
        return self._items[self._active_index]

    def _move(self, delta: int) -> None:
        count = len(self._items)

        if self._active_index < 0:
            # From idle, down lands on the first row; up falls back to the
            # first row too, or to the last one when wrapping
            self._active_index = count - 1 if (delta < 0 and self.wrap) else 0
            return

        index = self._active_index + delta
        if self.wrap:
            index %= count
        else:
            index = max(0, min(index, count - 1))
        self._active_index = index

    def _clear_focus(self) -> None:
        for item in self._items:
            item.remove_focus()
