"""Trip search orchestration.

A search obtains the device position, runs the core and deep queries
concurrently and merges them. Either both succeed or the search fails.

Searches are numbered as they start. Only the most recently started search
may replace the current state, so a slow earlier search can never overwrite
a later one. Auto-refresh ticks are skipped while an interactive search is in
flight, and their intermediate phases and failures are never published.
"""

import asyncio
import logging
import time

from lastmile.geo.provider import GeolocationError, GeolocationProvider
from lastmile.intel.client import TripIntelligenceClient
from lastmile.intel.errors import IntelError
from lastmile.intel.merge import merge_trip_analysis, now_ms
from lastmile.models.sharing import SharedSnapshot
from lastmile.models.trip import TripAnalysis
from lastmile.search.state import SearchFailedError, SearchFailure, SearchState
from lastmile.store.history import SearchHistory
from lastmile.utils.metrics import PrometheusIntelMetrics

logger = logging.getLogger(__name__)


class TripPlanner:
    """Runs searches and holds the current result."""

    def __init__(
        self,
        intel: TripIntelligenceClient,
        geolocation: GeolocationProvider,
        history: SearchHistory,
        *,
        geolocation_timeout_ms: int = 10_000,
        high_accuracy: bool = True,
        metrics: PrometheusIntelMetrics | None = None,
    ) -> None:
        self._intel = intel
        self._geolocation = geolocation
        self._history = history
        self._geolocation_timeout_ms = geolocation_timeout_ms
        self._high_accuracy = high_accuracy
        self._metrics = metrics or PrometheusIntelMetrics()

        self._sequence = 0
        self._interactive_in_flight = 0
        self._current: SearchState | None = None

    @property
    def current(self) -> SearchState | None:
        """Latest published search state."""
        return self._current

    @property
    def current_analysis(self) -> TripAnalysis | None:
        """Analysis of the latest published search, if it succeeded."""
        return self._current.analysis if self._current else None

    async def search(self, destination: str, *, auto_refresh: bool = False) -> SearchState | None:
        """Run one search for destination.

        Args:
            destination: Destination text as typed
            auto_refresh: True for background live-tracking ticks

        Returns:
            Final state of this search; None if an auto-refresh tick was skipped

        Raises:
            ValueError: If destination is blank
            SearchFailedError: If an interactive search fails
        """
        destination = destination.strip()
        if not destination:
            raise ValueError("Destination must not be empty")

        if auto_refresh and self._interactive_in_flight:
            logger.info(f"Skipping auto-refresh of {destination!r}: interactive search in flight")
            return None

        self._sequence += 1
        state = SearchState(
            sequence=self._sequence,
            destination=destination,
            kind="auto_refresh" if auto_refresh else "interactive",
            started_at=now_ms(),
        )

        if auto_refresh:
            state = await self._run(state, publish_phases=False)
        else:
            self._history.record(destination)
            self._interactive_in_flight += 1
            try:
                self._publish(state)
                state = await self._run(state, publish_phases=True)
            finally:
                self._interactive_in_flight -= 1

        self._metrics.record_search(state.kind, state.status, state.duration_s)

        if state.status == "succeeded" or not auto_refresh:
            self._publish(state)

        if state.error is not None:
            logger.warning(
                f"Search {state.sequence} for {destination!r} failed "
                f"({state.error.reason}): {state.error.message}"
            )
            if not auto_refresh:
                raise SearchFailedError(state.error.reason, state.error.message)

        return state

    def load_snapshot(self, snapshot: SharedSnapshot) -> SearchState:
        """Make a shared snapshot's analysis the current result."""
        self._sequence += 1
        analysis = snapshot.data.model_copy(deep=True)
        state = SearchState(
            sequence=self._sequence,
            destination=analysis.destination,
            kind="snapshot",
            status="succeeded",
            started_at=now_ms(),
            analysis=analysis,
        )
        self._publish(state)
        return state

    async def _run(self, state: SearchState, *, publish_phases: bool) -> SearchState:
        started = time.perf_counter()
        destination = state.destination
        deep_task: asyncio.Task | None = None

        try:
            position = await self._geolocation.get_current_position(
                high_accuracy=self._high_accuracy,
                timeout_ms=self._geolocation_timeout_ms,
            )

            core_task = asyncio.create_task(
                self._intel.fetch_core(destination, position.lat, position.lon)
            )
            deep_task = asyncio.create_task(
                self._intel.fetch_deep(destination, position.lat, position.lon)
            )

            core = await core_task
            state = state.model_copy(update={"status": "partial", "core": core})
            if publish_phases:
                self._publish(state)

            deep = await deep_task
            analysis = merge_trip_analysis(destination, core, deep)
            return state.model_copy(
                update={
                    "status": "succeeded",
                    "analysis": analysis,
                    "duration_s": time.perf_counter() - started,
                }
            )
        except (IntelError, GeolocationError) as e:
            failure = SearchFailure(reason=e.reason, message=str(e))
        except Exception as e:
            logger.exception(f"Search {state.sequence} for {destination!r} raised unexpectedly")
            failure = SearchFailure(reason="service_error", message=str(e) or type(e).__name__)
        finally:
            # Deep result is discarded when core fails
            if deep_task is not None and not deep_task.done():
                deep_task.cancel()

        return state.model_copy(
            update={
                "status": "failed",
                "error": failure,
                "duration_s": time.perf_counter() - started,
            }
        )

    def _publish(self, state: SearchState) -> bool:
        if state.sequence != self._sequence:
            logger.info(
                f"Discarding stale result of search {state.sequence} "
                f"(latest is {self._sequence})"
            )
            return False
        self._current = state
        return True
