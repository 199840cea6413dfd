"""
Search Orchestrator - Debounced, latest-wins dispatch of search queries.

Pipeline for every keystroke passed to submit():

  1. Clear the displayed results and flag loading (immediate feedback)
  2. Wait for a quiet period (debounce, 300 ms by default)
  3. Skip values identical to the previously settled one
  4. Empty value: canonical empty result set, no provider call
  5. Otherwise: auxiliary provider first (admins only, failures ignored),
     then the primary provider, whose result set is delivered

Each dispatch carries a generation token. Starting a new dispatch cancels
the previous one, and a completion whose token is no longer current is
discarded, so a slow stale query can never overwrite a newer one.

Failures never reach the view: they are logged and the empty result set is
shown instead.
"""

import asyncio
from typing import Optional

from gi.repository import GObject
from loguru import logger

from ..exceptions import ProviderFailure
from .models import AssetProfileHit, SearchResultSet
from .providers import SearchProvider


class SearchOrchestrator(GObject.Object):
    """
    Turns raw query input into the current SearchResultSet.

    Signals:
        changed(results, is_loading): Displayed results or loading flag changed

    Methods:
        activate(): Start accepting input
        submit(query): Feed one raw input value
        deactivate(): Cancel all pending work
    """

    __gtype_name__ = "SearchOrchestrator"

    __gsignals__ = {
        "changed": (GObject.SignalFlags.RUN_FIRST, None, (object, bool)),
    }

    DEFAULT_DEBOUNCE_MS = 300

    def __init__(
        self,
        primary: SearchProvider,
        auxiliary: Optional[SearchProvider] = None,
        has_admin_access: bool = False,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        merge_admin_results: bool = False,
    ):
        super().__init__()

        self.primary = primary
        self.auxiliary = auxiliary
        self.has_admin_access = has_admin_access
        self.debounce_ms = debounce_ms
        self.merge_admin_results = merge_admin_results

        self._results = SearchResultSet.empty()
        self._is_loading = False
        self._active = False

        self._generation = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._dispatch_task: Optional[asyncio.Task] = None

        # Last settled (debounced) value and, once its dispatch completed,
        # the results it produced
        self._last_term: Optional[str] = None
        self._last_results: Optional[SearchResultSet] = None

    @property
    def results(self) -> SearchResultSet:
        return self._results

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def generation(self) -> int:
        """Token of the most recently issued dispatch."""
        return self._generation

    def activate(self) -> None:
        self._active = True
        logger.debug("SearchOrchestrator activated")

    def deactivate(self) -> None:
        """Cancel the debounce timer and any in-flight dispatch."""
        self._cancel_debounce()
        self._cancel_dispatch()
        # Invalidate anything that ignores cancellation
        self._generation += 1
        self._last_term = None
        self._last_results = None
        self._is_loading = False
        self._active = False
        logger.debug("SearchOrchestrator deactivated")

    def submit(self, query: Optional[str]) -> None:
        """
        Feed one raw input value (called on every keystroke).

        Must be called from within the running event loop.
        """
        if not self._active:
            logger.debug(f"Ignoring query {query!r}: orchestrator is not active")
            return

        self._set_state(SearchResultSet.empty(), True)

        self._cancel_debounce()
        loop = asyncio.get_running_loop()
        self._debounce_task = loop.create_task(self._debounce(query or ""))

    async def wait_settled(self) -> None:
        """Wait until no debounce timer or dispatch is pending."""
        while True:
            pending = [
                task for task in (self._debounce_task, self._dispatch_task)
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    async def _debounce(self, term: str) -> None:
        await asyncio.sleep(self.debounce_ms / 1000)
        self._debounce_task = None
        self._on_settled(term)

    def _on_settled(self, term: str) -> None:
        """Handle a debounced value: suppress duplicates, else dispatch."""
        if term == self._last_term:
            logger.debug(f"Query {term!r} unchanged, not dispatching again")
            if self._last_results is not None:
                self._set_state(self._last_results, False)
            # Otherwise its dispatch is still running and will deliver
            return

        self._cancel_dispatch()
        self._generation += 1
        self._last_term = term
        self._last_results = None

        if not term:
            self._complete(SearchResultSet.empty())
            return

        logger.debug(f"Dispatching query {term!r} (generation {self._generation})")
        loop = asyncio.get_running_loop()
        self._dispatch_task = loop.create_task(self._dispatch(term, self._generation))

    async def _dispatch(self, term: str, generation: int) -> None:
        try:
            results = await self._fetch(term)
        except Exception:
            logger.exception(f"Search for {term!r} failed, showing no results")
            results = SearchResultSet.empty()

        if generation != self._generation:
            logger.debug(f"Discarding stale results for {term!r} (generation {generation})")
            return

        self._dispatch_task = None
        self._complete(results)

    async def _fetch(self, term: str) -> SearchResultSet:
        admin_profiles = None
        if self.auxiliary is not None and self.has_admin_access:
            try:
                admin_profiles = _admin_asset_profiles(await self.auxiliary.search(term))
            except Exception as error:
                logger.warning(f"{self.auxiliary.name} search for {term!r} failed, ignoring: {error}")

        try:
            results = SearchResultSet.coerce(await self.primary.search(term))
        except Exception as error:
            raise ProviderFailure(self.primary.name, term, error) from error

        if self.merge_admin_results and admin_profiles:
            results = results.with_asset_profiles_first(admin_profiles)
        return results

    def _complete(self, results: SearchResultSet) -> None:
        self._last_results = results
        if self._debounce_task is not None:
            # Newer input is still being debounced; keep the view cleared
            logger.debug("Holding back results: newer input pending")
            return
        self._set_state(results, False)

    def _set_state(self, results: SearchResultSet, is_loading: bool) -> None:
        self._results = results
        self._is_loading = is_loading
        self.emit("changed", results, is_loading)

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    def _cancel_dispatch(self) -> None:
        if self._dispatch_task is not None:
            self._dispatch_task.cancel()
            self._dispatch_task = None


def _admin_asset_profiles(answer) -> tuple[AssetProfileHit, ...]:
    """Asset profiles out of an auxiliary answer (result set, mapping or list)."""
    if isinstance(answer, (list, tuple)):
        answer = {"assetProfiles": answer}
    return SearchResultSet.coerce(answer).asset_profiles
