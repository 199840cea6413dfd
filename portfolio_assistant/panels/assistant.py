"""
Assistant Panel - The command-palette widget as seen by the host.

Features:
- Search input feeding the debounced SearchOrchestrator
- Result rows rebuilt on every result change (asset profiles, then holdings)
- Keyboard navigation (arrow keys, Enter to activate) while open
- Filter form (account, asset class, tag, holding) and date range
- Holdings loaded once on activation for the holding filter

Host events: closed, date-range-changed, filters-changed, and
scroll-requested for the view to bring the active row into sight.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from gi.repository import GObject
from loguru import logger

from ..search.models import AssetProfileHit, SearchHit, SearchResultSet
from ..search.orchestrator import SearchOrchestrator
from ..search.providers import HoldingsProvider, SearchProvider
from ..services.filters import FilterSelection, FilterStateManager
from ..services.holdings import HoldingsCache
from ..services.user import Permissions, User
from ..utils.helpers import DEFAULT_SETTINGS, _deep_merge, identity_translate, load_settings
from .navigation import FocusNavigator, KeyEvent


@dataclass(eq=False)
class ResultRow:
    """One rendered search result; drives the view through callbacks."""
    hit: SearchHit
    result_type: str = "holding"  # asset_profile, holding
    on_activate: Optional[Callable] = None
    on_scroll: Optional[Callable] = None
    is_focused: bool = False

    @property
    def title(self) -> str:
        return self.hit.name or self.hit.symbol

    @property
    def description(self) -> str:
        parts = [self.hit.symbol, self.hit.data_source]
        return " · ".join(part for part in parts if part)

    def activate(self) -> None:
        if self.on_activate:
            self.on_activate(self)

    def scroll_into_view(self, smooth: bool = True, center: bool = True) -> None:
        if self.on_scroll:
            self.on_scroll(self, smooth, center)

    def set_focus(self) -> None:
        self.is_focused = True

    def remove_focus(self) -> None:
        self.is_focused = False


class AssistantPanel(GObject.Object):
    """
    Wires search, navigation, filters and holdings into one widget.

    Signals:
        closed: Widget dismissed
        date-range-changed(value): A date range was picked
        filters-changed(selections): Filters applied (4-entry list)
        results-changed(results, is_loading): Rows were rebuilt
        scroll-requested(row, smooth, center): Bring a row into view

    Args:
        primary: Search provider always queried
        holdings_provider: Source for the holding filter
        auxiliary: Admin search provider, queried for admins only
        translate: Label translation collaborator
        navigate: Called with the hit of an activated row
        settings: Settings overrides, merged over the defaults; loaded from
            disk if None
    """

    __gtype_name__ = "AssistantPanel"

    __gsignals__ = {
        "closed": (GObject.SignalFlags.RUN_FIRST, None, ()),
        "date-range-changed": (GObject.SignalFlags.RUN_FIRST, None, (str,)),
        "filters-changed": (GObject.SignalFlags.RUN_FIRST, None, (object,)),
        "results-changed": (GObject.SignalFlags.RUN_FIRST, None, (object, bool)),
        "scroll-requested": (GObject.SignalFlags.RUN_FIRST, None, (object, bool, bool)),
    }

    def __init__(
        self,
        primary: SearchProvider,
        holdings_provider: HoldingsProvider,
        auxiliary: Optional[SearchProvider] = None,
        translate: Callable[[str], str] = identity_translate,
        navigate: Optional[Callable[[SearchHit], Any]] = None,
        settings: Optional[Dict[str, Any]] = None,
    ):
        super().__init__()

        if settings is None:
            self.settings = load_settings()
        else:
            self.settings = _deep_merge(DEFAULT_SETTINGS, settings)
        self.translate = translate
        self.navigate = navigate
        self.holdings_provider = holdings_provider

        self.holdings = HoldingsCache(
            fuzzy_threshold=self.settings["holdings"]["fuzzy_threshold"],
        )
        self.filters = FilterStateManager(self.holdings, translate)
        self.orchestrator = SearchOrchestrator(
            primary,
            auxiliary,
            debounce_ms=self.settings["search"]["debounce_ms"],
            merge_admin_results=self.settings["search"]["merge_admin_results"],
        )
        self.navigator = FocusNavigator(wrap=self.settings["navigation"]["wrap"])

        self.user: Optional[User] = None
        self.permissions = Permissions()
        self.is_open = False
        self.rows: list[ResultRow] = []

        self._holdings_task: Optional[asyncio.Task] = None

        self.orchestrator.connect("changed", self._on_results_changed)
        self.filters.connect("filters-changed", lambda _f, selections: self.emit("filters-changed", selections))
        self.filters.connect("date-range-changed", lambda _f, value: self.emit("date-range-changed", value))
        self.filters.connect("closed", lambda _f: self.close())

    @property
    def placeholder(self) -> str:
        return self.translate("Find holding...")

    @property
    def results(self) -> SearchResultSet:
        return self.orchestrator.results

    @property
    def is_loading(self) -> bool:
        return self.orchestrator.is_loading

    def set_inputs(
        self,
        user: Optional[User] = None,
        device_type: str = "desktop",
        has_permission_to_access_admin_control: bool = False,
        has_permission_to_change_date_range: bool = False,
        has_permission_to_change_filters: bool = False,
    ) -> None:
        """Take new host inputs; re-initialises the filter form."""
        self.user = user
        self.permissions = Permissions(
            device_type=device_type,
            has_permission_to_access_admin_control=has_permission_to_access_admin_control,
            has_permission_to_change_date_range=has_permission_to_change_date_range,
            has_permission_to_change_filters=has_permission_to_change_filters,
        )
        self.orchestrator.has_admin_access = has_permission_to_access_admin_control
        self.filters.update(user, self.permissions)

    def activate(self) -> None:
        """
        Start the widget: accept search input and load holdings once.

        Must be called from within the running event loop.
        """
        self.orchestrator.activate()

        loading = self._holdings_task is not None and not self._holdings_task.done()
        if not loading and not self.holdings.is_loaded:
            loop = asyncio.get_running_loop()
            self._holdings_task = loop.create_task(self._load_holdings())

    def deactivate(self) -> None:
        """Tear down: cancel pending search and holdings work, drop rows."""
        self.orchestrator.deactivate()

        if self._holdings_task is not None and not self._holdings_task.done():
            self._holdings_task.cancel()

        self.navigator.set_items([])
        self.rows = []
        self.is_open = False

    async def _load_holdings(self) -> None:
        try:
            await self.holdings.load(
                self.holdings_provider,
                self.settings["holdings"]["range"],
            )
        except Exception:
            logger.exception("Failed to load holdings, holding filter stays empty")

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False
        self.emit("closed")

    def on_search_changed(self, text: str) -> None:
        self.orchestrator.submit(text)

    def on_keydown(self, event: KeyEvent) -> bool:
        """Handle keyboard events - arrows for navigation, Enter to activate."""
        if not self.is_open:
            return False
        return self.navigator.on_keydown(event)

    def on_apply_filters(self) -> list[FilterSelection]:
        return self.filters.apply()

    def on_date_range_changed(self, value: str) -> None:
        self.filters.select_date_range(value)

    def _on_results_changed(self, _orchestrator, results: SearchResultSet, is_loading: bool) -> None:
        """Rebuild rows from the current result set."""
        self.rows = [
            ResultRow(
                hit=hit,
                result_type="asset_profile" if isinstance(hit, AssetProfileHit) else "holding",
                on_activate=self._on_row_activated,
                on_scroll=self._on_row_scroll,
            )
            for hit in results.hits()
        ]
        self.navigator.set_items(self.rows)
        self.emit("results-changed", results, is_loading)

    def _on_row_scroll(self, row: ResultRow, smooth: bool, center: bool) -> None:
        self.emit("scroll-requested", row, smooth, center)

    def _on_row_activated(self, row: ResultRow) -> None:
        logger.debug(f"Row activated: {row.result_type} {row.hit.symbol}")
        if self.navigate:
            self.navigate(row.hit)
        self.close()
