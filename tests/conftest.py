"""
Shared test fixtures for the assistant test suite.

Provides fake providers that record their calls and can be held open with
an asyncio.Event, fast settings, a settings TOML file and a loguru sink.
"""

import asyncio

import pytest
import toml
from loguru import logger

from portfolio_assistant.search.providers import HoldingsProvider, SearchProvider
from portfolio_assistant.utils.helpers import _deep_merge, DEFAULT_SETTINGS

AAPL_RESULTS = {
    "assetProfiles": [{"symbol": "AAPL", "name": "Apple Inc.", "dataSource": "YAHOO"}],
    "holdings": [],
}


class FakeSearchProvider(SearchProvider):
    """Answers from a dict; records calls; can fail or wait on a gate."""

    def __init__(self, name="data", answers=None, error=None, journal=None):
        self._name = name
        self.answers = answers or {}
        self.error = error
        self.calls = []
        self.gates = {}
        self.journal = journal

    @property
    def name(self):
        return self._name

    def gate(self, term):
        """Hold searches for term until the returned event is set."""
        event = asyncio.Event()
        self.gates[term] = event
        return event

    async def search(self, term):
        self.calls.append(term)
        if self.journal is not None:
            self.journal.append((self._name, term))
        if term in self.gates:
            await self.gates[term].wait()
        if self.error:
            raise self.error
        return self.answers.get(term, {"assetProfiles": [], "holdings": []})


class FakeHoldingsProvider(HoldingsProvider):
    def __init__(self, holdings=None, error=None):
        self.holdings = holdings if holdings is not None else []
        self.error = error
        self.calls = []
        self.gate = None

    async def fetch_holdings(self, range):
        self.calls.append(range)
        if self.gate is not None:
            await self.gate.wait()
        if self.error:
            raise self.error
        return self.holdings


async def wait_until(predicate, timeout=1.0):
    """Poll predicate on the event loop until it holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.002)


@pytest.fixture
def primary():
    return FakeSearchProvider("data", answers={"AAP": AAPL_RESULTS})


@pytest.fixture
def auxiliary():
    return FakeSearchProvider("admin")


@pytest.fixture
def holdings_provider():
    return FakeHoldingsProvider([
        {"symbol": "CHRY", "name": "cherry"},
        {"symbol": "APPL", "name": "apple"},
        {"symbol": "BNNA", "name": "Banana"},
    ])


@pytest.fixture
def fast_settings():
    """Defaults with a short debounce so tests run quickly."""
    return _deep_merge(DEFAULT_SETTINGS, {"search": {"debounce_ms": 20}})


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "search": {"debounce_ms": 150, "merge_admin_results": True},
        "holdings": {"range": "max", "fuzzy_threshold": 60},
        "navigation": {"wrap": True},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
