"""
Tests for the AssistantPanel wiring.

Runs the real orchestrator, navigator, filters and holdings cache against
fake providers.
"""

import asyncio

import pytest

from portfolio_assistant.panels.assistant import AssistantPanel
from portfolio_assistant.panels.navigation import KeyEvent
from portfolio_assistant.services.filters import FilterType
from portfolio_assistant.services.user import Tag, User

from conftest import FakeHoldingsProvider, wait_until

MIXED_RESULTS = {
    "assetProfiles": [{"symbol": "AAPL", "name": "Apple Inc."}],
    "holdings": [{"symbol": "MSFT", "name": "Microsoft"}, {"symbol": "VT", "name": "World"}],
}


@pytest.fixture
def navigated():
    return []


@pytest.fixture
def panel(primary, auxiliary, holdings_provider, fast_settings, navigated):
    primary.answers["mix"] = MIXED_RESULTS
    return AssistantPanel(
        primary,
        holdings_provider,
        auxiliary=auxiliary,
        navigate=navigated.append,
        settings=fast_settings,
    )


async def _search(panel, text):
    panel.on_search_changed(text)
    await panel.orchestrator.wait_settled()


class TestSearchRows:
    @pytest.mark.asyncio
    async def test_rows_follow_results(self, panel):
        panel.activate()
        await _search(panel, "mix")

        assert [(row.result_type, row.hit.symbol) for row in panel.rows] == [
            ("asset_profile", "AAPL"),
            ("holding", "MSFT"),
            ("holding", "VT"),
        ]
        assert panel.navigator.items == tuple(panel.rows)
        assert panel.is_loading is False

    @pytest.mark.asyncio
    async def test_new_input_drops_rows_and_focus(self, panel):
        panel.activate()
        panel.open()
        await _search(panel, "mix")
        panel.on_keydown(KeyEvent("ArrowDown"))
        first_row = panel.rows[0]
        assert first_row.is_focused

        panel.on_search_changed("mi")

        assert panel.rows == []
        assert first_row.is_focused is False
        assert panel.navigator.active_index is None
        await panel.orchestrator.wait_settled()

    @pytest.mark.asyncio
    async def test_results_changed_signal(self, panel):
        panel.activate()
        seen = []
        panel.connect("results-changed", lambda _p, results, loading: seen.append(loading))

        await _search(panel, "mix")

        assert seen == [True, False]

    def test_row_labels(self, panel):
        from portfolio_assistant.panels.assistant import ResultRow
        from portfolio_assistant.search.models import HoldingHit

        row = ResultRow(hit=HoldingHit(symbol="VT", name="World", data_source="YAHOO"))
        assert row.title == "World"
        assert row.description == "VT · YAHOO"


class TestKeyboard:
    @pytest.mark.asyncio
    async def test_keys_ignored_while_closed(self, panel, navigated):
        panel.activate()
        await _search(panel, "mix")

        assert panel.on_keydown(KeyEvent("ArrowDown")) is False
        event = KeyEvent("Enter")
        assert panel.on_keydown(event) is False

        assert panel.navigator.active_index is None
        assert navigated == []
        assert event.propagation_stopped is False

    @pytest.mark.asyncio
    async def test_enter_navigates_to_active_row_and_closes(self, panel, navigated):
        closed = []
        panel.connect("closed", lambda _p: closed.append(True))
        panel.activate()
        panel.open()
        await _search(panel, "mix")

        panel.on_keydown(KeyEvent("ArrowDown"))
        panel.on_keydown(KeyEvent("ArrowDown"))
        event = KeyEvent("Enter")
        assert panel.on_keydown(event) is True

        assert [hit.symbol for hit in navigated] == ["MSFT"]
        assert event.propagation_stopped is True
        assert closed == [True]
        assert panel.is_open is False

    @pytest.mark.asyncio
    async def test_scroll_requests_reach_the_view(self, panel):
        scrolled = []
        panel.connect(
            "scroll-requested",
            lambda _p, row, smooth, center: scrolled.append((row.hit.symbol, smooth, center)),
        )
        panel.activate()
        panel.open()
        await _search(panel, "mix")

        panel.on_keydown(KeyEvent("ArrowDown"))
        panel.on_keydown(KeyEvent("ArrowDown"))

        assert scrolled == [("AAPL", True, True), ("MSFT", True, True)]

    @pytest.mark.asyncio
    async def test_scroll_requests_survive_a_rerender(self, panel):
        scrolled = []
        panel.connect("scroll-requested", lambda _p, row, smooth, center: scrolled.append(row))
        panel.activate()
        panel.open()
        await _search(panel, "mix")
        panel.on_search_changed("AAP")
        await panel.orchestrator.wait_settled()

        panel.on_keydown(KeyEvent("ArrowDown"))

        assert scrolled == [panel.rows[0]]


class TestInputs:
    def test_admin_flag_reaches_orchestrator(self, panel):
        panel.set_inputs(User(), has_permission_to_access_admin_control=True)
        assert panel.orchestrator.has_admin_access is True

        panel.set_inputs(User())
        assert panel.orchestrator.has_admin_access is False

    @pytest.mark.asyncio
    async def test_admin_provider_queried_for_admins(self, panel, auxiliary):
        panel.set_inputs(User(), has_permission_to_access_admin_control=True)
        panel.activate()
        await _search(panel, "mix")

        assert auxiliary.calls == ["mix"]

    def test_set_inputs_updates_filters(self, panel):
        user = User(tags=(Tag(id="t1", name="Core", is_used=True),), settings={"filters.tags": ["t1"]})
        panel.set_inputs(user, has_permission_to_change_filters=True)

        assert panel.filters.tag.value == "t1"
        assert panel.filters.tag.disabled is False
        assert panel.permissions.has_permission_to_change_filters is True

    def test_placeholder_is_translated(self, primary, holdings_provider, fast_settings):
        panel = AssistantPanel(
            primary, holdings_provider, translate=lambda key: f"[{key}]", settings=fast_settings,
        )
        assert panel.placeholder == "[Find holding...]"


class TestFilterEvents:
    def test_apply_emits_filters_then_closed(self, panel):
        panel.set_inputs(User(settings={"filters.assetClasses": ["EQUITY"]}), has_permission_to_change_filters=True)
        panel.open()
        events = []
        panel.connect("filters-changed", lambda _p, selections: events.append([s.id for s in selections]))
        panel.connect("closed", lambda _p: events.append("closed"))

        panel.on_apply_filters()

        assert events == [[None, "EQUITY", None, None], "closed"]
        assert panel.is_open is False

    def test_date_range_change_is_forwarded(self, panel):
        panel.set_inputs(User(), has_permission_to_change_date_range=True)
        emitted = []
        panel.connect("date-range-changed", lambda _p, value: emitted.append(value))

        panel.on_date_range_changed("5y")

        assert emitted == ["5y"]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_holdings_loaded_once_on_activation(self, panel, holdings_provider):
        panel.set_inputs(User(), has_permission_to_change_filters=True)
        panel.activate()
        await wait_until(lambda: panel.holdings.is_loaded)

        panel.deactivate()
        panel.activate()
        await asyncio.sleep(0.01)

        assert holdings_provider.calls == ["max"]
        assert panel.filters.holding.option_ids() == ["APPL", "BNNA", "CHRY"]
        panel.filters.select(FilterType.SYMBOL, "APPL")

    @pytest.mark.asyncio
    async def test_holdings_failure_leaves_filter_empty(self, primary, fast_settings, log_records):
        provider = FakeHoldingsProvider(error=ConnectionError("offline"))
        panel = AssistantPanel(primary, provider, settings=fast_settings)
        panel.activate()
        await wait_until(lambda: provider.calls == ["max"])
        await asyncio.sleep(0.01)

        assert panel.holdings.holdings == ()
        assert panel.filters.holding.options == []
        assert any(r["level"].name == "ERROR" and "holdings" in r["message"] for r in log_records)

    @pytest.mark.asyncio
    async def test_deactivate_cancels_pending_holdings_load(self, primary, fast_settings):
        provider = FakeHoldingsProvider([{"symbol": "VT", "name": "World"}])
        provider.gate = asyncio.Event()
        panel = AssistantPanel(primary, provider, settings=fast_settings)

        panel.activate()
        await wait_until(lambda: provider.calls == ["max"])
        panel.deactivate()
        provider.gate.set()
        await asyncio.sleep(0.01)

        assert panel.holdings.is_loaded is False

    @pytest.mark.asyncio
    async def test_deactivate_cancels_search_and_drops_rows(self, panel, primary):
        panel.activate()
        panel.open()
        await _search(panel, "mix")

        panel.on_search_changed("AAP")
        panel.deactivate()
        await asyncio.sleep(0.04)

        assert primary.calls == ["mix"]
        assert panel.rows == []
        assert panel.is_open is False


class TestSettingsOverrides:
    """Settings passed by the host are merged over the defaults."""

    def test_partial_settings_keep_other_defaults(self, primary, holdings_provider):
        panel = AssistantPanel(primary, holdings_provider, settings={"navigation": {"wrap": True}})

        assert panel.navigator.wrap is True
        assert panel.orchestrator.debounce_ms == 300
        assert panel.orchestrator.merge_admin_results is False
        assert panel.holdings.fuzzy_threshold == 50
        assert panel.settings["holdings"]["range"] == "max"

    def test_empty_settings_use_defaults(self, primary, holdings_provider):
        panel = AssistantPanel(primary, holdings_provider, settings={})

        assert panel.navigator.wrap is False
        assert panel.orchestrator.debounce_ms == 300
