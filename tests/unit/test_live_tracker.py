"""Tests for live tracking."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from lastmile.search.live import LiveTracker


def make_planner(destination: str | None = "Ferry Building") -> MagicMock:
    """Planner double whose searches succeed until told otherwise."""
    planner = MagicMock()
    planner.current_analysis = SimpleNamespace(destination=destination) if destination else None
    planner.search = AsyncMock(return_value=SimpleNamespace(status="succeeded"))
    return planner


def make_tracker(planner: MagicMock, **kwargs) -> LiveTracker:  # type: ignore[no-untyped-def]
    return LiveTracker(planner, metrics=MagicMock(), **kwargs)


@pytest.mark.asyncio
async def test_start_requires_analysis() -> None:
    """Test that tracking cannot start without a current analysis."""
    tracker = make_tracker(make_planner(destination=None))

    with pytest.raises(LookupError):
        tracker.start()
    assert tracker.active is False


@pytest.mark.asyncio
async def test_start_twice_keeps_single_task() -> None:
    """Test that restarting replaces the refresh task instead of adding one."""
    tracker = make_tracker(make_planner(), interval_s=60)

    tracker.start()
    first = tracker._task
    status = tracker.start()
    second = tracker._task

    await asyncio.sleep(0)
    assert first is not None and second is not None
    assert first is not second
    assert first.cancelled()
    assert tracker.active is True
    assert status.active is True
    assert status.destination == "Ferry Building"

    await tracker.shutdown()
    assert tracker.active is False


@pytest.mark.asyncio
async def test_stop_cancels_immediately() -> None:
    """Test that stop cancels the task and is idempotent."""
    planner = make_planner()
    tracker = make_tracker(planner, interval_s=0.01)

    tracker.start()
    tracker.stop()
    tracker.stop()
    await asyncio.sleep(0.05)

    assert tracker.active is False
    planner.search.assert_not_called()


@pytest.mark.asyncio
async def test_refreshes_periodically() -> None:
    """Test that the task re-searches the destination each interval."""
    planner = make_planner()
    tracker = make_tracker(planner, interval_s=0.01)

    tracker.start()
    await asyncio.sleep(0.1)
    await tracker.shutdown()

    assert planner.search.await_count >= 2
    planner.search.assert_awaited_with("Ferry Building", auto_refresh=True)
    assert tracker.status().last_refresh_at is not None


@pytest.mark.asyncio
async def test_degraded_after_threshold_then_recovers() -> None:
    """Test that consecutive failures mark the tracker degraded until a success."""
    planner = make_planner()
    planner.search.return_value = SimpleNamespace(status="failed")
    tracker = make_tracker(planner, failure_threshold=3)

    await tracker.refresh_once()
    await tracker.refresh_once()
    assert tracker.degraded is False

    await tracker.refresh_once()
    assert tracker.degraded is True
    assert tracker.status().consecutive_failures == 3

    planner.search.return_value = SimpleNamespace(status="succeeded")
    await tracker.refresh_once()

    assert tracker.degraded is False
    assert tracker.status().consecutive_failures == 0


@pytest.mark.asyncio
async def test_refresh_exception_counts_as_failure() -> None:
    """Test that an exception from a refresh is absorbed and counted."""
    planner = make_planner()
    planner.search.side_effect = RuntimeError("boom")
    tracker = make_tracker(planner)

    await tracker.refresh_once()

    assert tracker.status().consecutive_failures == 1
    tracker._metrics.inc_live_failure.assert_called_once()


@pytest.mark.asyncio
async def test_skipped_refresh_is_not_counted() -> None:
    """Test that a tick skipped by the planner neither fails nor succeeds."""
    planner = make_planner()
    planner.search.return_value = None
    tracker = make_tracker(planner)

    await tracker.refresh_once()

    status = tracker.status()
    assert status.consecutive_failures == 0
    assert status.last_refresh_at is None


@pytest.mark.asyncio
async def test_failures_do_not_stop_the_task() -> None:
    """Test that the task keeps running through repeated failures."""
    planner = make_planner()
    planner.search.side_effect = RuntimeError("boom")
    tracker = make_tracker(planner, interval_s=0.01, failure_threshold=2)

    tracker.start()
    await asyncio.sleep(0.1)

    assert tracker.active is True
    assert tracker.degraded is True

    await tracker.shutdown()


@pytest.mark.asyncio
async def test_status_serializes_camel_case() -> None:
    """Test the status payload field names."""
    tracker = make_tracker(make_planner(), interval_s=30)

    data = tracker.status().model_dump(by_alias=True)

    assert data == {
        "active": False,
        "destination": None,
        "intervalS": 30,
        "consecutiveFailures": 0,
        "degraded": False,
        "lastRefreshAt": None,
    }
