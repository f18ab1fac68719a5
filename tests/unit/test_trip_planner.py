"""Tests for trip search orchestration."""

import asyncio
from unittest.mock import MagicMock

import pytest

from lastmile.geo.provider import PermissionDeniedError, ReportedPositionProvider
from lastmile.intel.client import TripIntelligenceClient
from lastmile.intel.errors import InvalidTimeValuesError
from lastmile.models import CoreIntel, DeepIntel, Geo, SharedSnapshot
from lastmile.search.planner import TripPlanner
from lastmile.search.state import SearchFailedError
from lastmile.store.history import SearchHistory
from lastmile.store.kv import InMemoryKeyValueStore


def core_for(destination: str, drive: float = 10) -> CoreIntel:
    return CoreIntel.model_validate(
        {
            "destination": destination.title(),
            "driving": {"driveTimeMins": drive, "trafficStatus": "Clear"},
            "walking": {"walkTimeMins": 4},
        }
    )


class FakeIntel:
    """Intel client double with optional per-destination gates and failures."""

    def __init__(self) -> None:
        self.core_gates: dict[str, asyncio.Event] = {}
        self.deep_gates: dict[str, asyncio.Event] = {}
        self.core_errors: dict[str, Exception] = {}
        self.deep_cancelled: list[str] = []
        self.calls: list[tuple[str, str, float, float]] = []

    async def fetch_core(self, destination: str, lat: float, lng: float) -> CoreIntel:
        self.calls.append(("core", destination, lat, lng))
        if destination in self.core_gates:
            await self.core_gates[destination].wait()
        if destination in self.core_errors:
            raise self.core_errors[destination]
        return core_for(destination)

    async def fetch_deep(self, destination: str, lat: float, lng: float) -> DeepIntel:
        self.calls.append(("deep", destination, lat, lng))
        try:
            if destination in self.deep_gates:
                await self.deep_gates[destination].wait()
        except asyncio.CancelledError:
            self.deep_cancelled.append(destination)
            raise
        return DeepIntel.model_validate(
            {"driving": {"parkingOptions": [{"name": "Lot", "walkTimeMins": 2}]}}
        )


@pytest.fixture
def intel() -> FakeIntel:
    return FakeIntel()


@pytest.fixture
def geolocation() -> ReportedPositionProvider:
    provider = ReportedPositionProvider()
    provider.report(Geo(lat=37.77, lon=-122.42))
    return provider


@pytest.fixture
def history() -> SearchHistory:
    return SearchHistory(InMemoryKeyValueStore())


@pytest.fixture
def planner(intel: FakeIntel, geolocation: ReportedPositionProvider, history: SearchHistory) -> TripPlanner:
    return TripPlanner(intel, geolocation, history, geolocation_timeout_ms=50, metrics=MagicMock())  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_successful_search(planner: TripPlanner, intel: FakeIntel, history: SearchHistory) -> None:
    """Test that a search merges both queries and becomes current."""
    state = await planner.search("  ferry building ")

    assert state is not None
    assert state.status == "succeeded"
    assert state.kind == "interactive"
    assert state.analysis is not None
    assert state.analysis.destination == "Ferry Building"
    assert state.analysis.driving.total_time_mins == 12
    assert state.duration_s is not None
    assert planner.current == state
    assert planner.current_analysis == state.analysis
    assert history.entries() == ["ferry building"]
    assert {call[0] for call in intel.calls} == {"core", "deep"}
    assert all(call[2:] == (37.77, -122.42) for call in intel.calls)


@pytest.mark.asyncio
async def test_blank_destination_rejected(planner: TripPlanner, history: SearchHistory) -> None:
    """Test that a blank destination is rejected before anything runs."""
    with pytest.raises(ValueError):
        await planner.search("   ")

    assert planner.current is None
    assert history.entries() == []


@pytest.mark.asyncio
async def test_core_failure_fails_search_and_cancels_deep(planner: TripPlanner, intel: FakeIntel) -> None:
    """Test that a core failure fails the search even though deep is still running."""
    intel.core_errors["museum"] = InvalidTimeValuesError("Missing or zero time values")
    intel.deep_gates["museum"] = asyncio.Event()

    with pytest.raises(SearchFailedError) as exc_info:
        await planner.search("museum")

    assert exc_info.value.reason == "invalid_time_values"
    assert planner.current is not None
    assert planner.current.status == "failed"
    assert planner.current.analysis is None
    assert planner.current.error is not None
    assert planner.current.error.reason == "invalid_time_values"

    await asyncio.sleep(0)
    assert intel.deep_cancelled == ["museum"]


@pytest.mark.asyncio
async def test_unexpected_core_error_is_service_error(planner: TripPlanner, intel: FakeIntel) -> None:
    """Test that raw service errors fail the search with a generic reason."""
    intel.core_errors["museum"] = ConnectionError("reset by peer")

    with pytest.raises(SearchFailedError) as exc_info:
        await planner.search("museum")

    assert exc_info.value.reason == "service_error"
    assert "reset by peer" in exc_info.value.message


@pytest.mark.asyncio
async def test_position_denied_fails_search(
    planner: TripPlanner, geolocation: ReportedPositionProvider, intel: FakeIntel
) -> None:
    """Test that a geolocation failure fails the search without querying."""
    geolocation.deny()

    with pytest.raises(SearchFailedError) as exc_info:
        await planner.search("museum")

    assert exc_info.value.reason == "permission_denied"
    assert intel.calls == []


@pytest.mark.asyncio
async def test_partial_state_published_while_deep_outstanding(planner: TripPlanner, intel: FakeIntel) -> None:
    """Test that core results are visible before deep finishes."""
    intel.deep_gates["pier"] = asyncio.Event()

    task = asyncio.create_task(planner.search("pier"))
    for _ in range(20):
        await asyncio.sleep(0)
        if planner.current is not None and planner.current.status == "partial":
            break

    assert planner.current is not None
    assert planner.current.status == "partial"
    assert planner.current.core is not None
    assert planner.current.analysis is None

    intel.deep_gates["pier"].set()
    state = await task

    assert state is not None
    assert state.status == "succeeded"
    assert planner.current.status == "succeeded"


@pytest.mark.asyncio
async def test_stale_result_is_discarded(planner: TripPlanner, intel: FakeIntel) -> None:
    """Test that a slow earlier search cannot overwrite a later one."""
    intel.core_gates["slow"] = asyncio.Event()

    slow = asyncio.create_task(planner.search("slow"))
    await asyncio.sleep(0)
    fast = await planner.search("fast")

    intel.core_gates["slow"].set()
    slow_state = await slow

    assert fast is not None and slow_state is not None
    assert slow_state.status == "succeeded"
    assert slow_state.sequence < fast.sequence
    assert planner.current == fast
    assert planner.current_analysis is not None
    assert planner.current_analysis.destination == "Fast"


@pytest.mark.asyncio
async def test_auto_refresh_failure_is_silent(planner: TripPlanner, intel: FakeIntel) -> None:
    """Test that a failed auto-refresh keeps the last good analysis."""
    good = await planner.search("harbor")
    intel.core_errors["harbor"] = InvalidTimeValuesError("zero")

    state = await planner.search("harbor", auto_refresh=True)

    assert state is not None
    assert state.status == "failed"
    assert state.kind == "auto_refresh"
    assert planner.current == good


@pytest.mark.asyncio
async def test_auto_refresh_success_replaces_analysis(
    planner: TripPlanner, history: SearchHistory
) -> None:
    """Test that a successful auto-refresh becomes current without touching history."""
    await planner.search("harbor")
    history.clear()

    state = await planner.search("harbor", auto_refresh=True)

    assert state is not None
    assert state.status == "succeeded"
    assert planner.current == state
    assert history.entries() == []


@pytest.mark.asyncio
async def test_auto_refresh_never_publishes_intermediate_phases(planner: TripPlanner, intel: FakeIntel) -> None:
    """Test that a refresh in progress does not replace the shown analysis."""
    good = await planner.search("harbor")
    intel.deep_gates["harbor"] = asyncio.Event()

    task = asyncio.create_task(planner.search("harbor", auto_refresh=True))
    for _ in range(10):
        await asyncio.sleep(0)

    assert planner.current == good

    intel.deep_gates["harbor"].set()
    await task


@pytest.mark.asyncio
async def test_auto_refresh_skipped_while_interactive_in_flight(planner: TripPlanner, intel: FakeIntel) -> None:
    """Test that a refresh tick does nothing while a user search runs."""
    intel.core_gates["museum"] = asyncio.Event()

    interactive = asyncio.create_task(planner.search("museum"))
    await asyncio.sleep(0)

    assert await planner.search("harbor", auto_refresh=True) is None

    intel.core_gates["museum"].set()
    state = await interactive
    assert state is not None
    assert planner.current == state


def test_load_snapshot_becomes_current(planner: TripPlanner, sample_analysis) -> None:  # type: ignore[no-untyped-def]
    """Test that loading a snapshot shows its analysis."""
    snapshot = SharedSnapshot.model_validate(
        {"id": "s1", "from": "bob", "to": "alice", "data": sample_analysis, "sentAt": 1}
    )

    state = planner.load_snapshot(snapshot)

    assert state.kind == "snapshot"
    assert state.status == "succeeded"
    assert planner.current_analysis == sample_analysis


def test_planner_accepts_real_intel_client(
    geolocation: ReportedPositionProvider, history: SearchHistory, scripted_service
) -> None:  # type: ignore[no-untyped-def]
    """Test end to end through the real intel client."""
    intel = TripIntelligenceClient(scripted_service, fetch_logger=MagicMock(), metrics=MagicMock())
    planner = TripPlanner(intel, geolocation, history, metrics=MagicMock())

    state = asyncio.run(planner.search("ferry building"))

    assert state is not None
    assert state.analysis is not None
    assert state.analysis.destination == "Ferry Building"
    assert state.analysis.driving.total_time_mins == 16
    assert state.analysis.walking.weather_condition == "Fog"
