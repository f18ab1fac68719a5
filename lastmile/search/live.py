"""Live tracking: periodic re-search of the current destination.

At most one refresh task runs at a time. Refresh failures are never reported
to the user and never stop the task; after ``failure_threshold`` consecutive
failures the tracker reports itself degraded until a refresh succeeds.
"""

import asyncio
import contextlib
import logging

from pydantic import Field

from lastmile.intel.merge import now_ms
from lastmile.models.common import CamelModel
from lastmile.search.planner import TripPlanner
from lastmile.utils.metrics import PrometheusIntelMetrics

logger = logging.getLogger(__name__)


class LiveStatus(CamelModel):
    """Snapshot of the live tracker for clients."""

    active: bool
    destination: str | None = None
    interval_s: float
    consecutive_failures: int = 0
    degraded: bool = False
    last_refresh_at: int | None = Field(None, description="Epoch ms of the last successful refresh")


class LiveTracker:
    """Owns the single recurring refresh task."""

    def __init__(
        self,
        planner: TripPlanner,
        *,
        interval_s: float = 120.0,
        failure_threshold: int = 3,
        metrics: PrometheusIntelMetrics | None = None,
    ) -> None:
        self._planner = planner
        self._interval_s = interval_s
        self._failure_threshold = failure_threshold
        self._metrics = metrics or PrometheusIntelMetrics()

        self._task: asyncio.Task | None = None
        self._destination: str | None = None
        self._consecutive_failures = 0
        self._last_refresh_at: int | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def degraded(self) -> bool:
        return self._consecutive_failures >= self._failure_threshold

    def start(self) -> LiveStatus:
        """Begin tracking the current analysis, replacing any running task.

        Must be called from a running event loop.

        Raises:
            LookupError: If there is no current analysis to track
        """
        analysis = self._planner.current_analysis
        if analysis is None:
            raise LookupError("No trip analysis to track")

        self.stop()
        self._destination = analysis.destination
        self._consecutive_failures = 0
        self._last_refresh_at = None
        self._task = asyncio.create_task(self._run(), name="lastmile-live-refresh")
        logger.info(f"Live tracking started for {self._destination!r} every {self._interval_s}s")
        return self.status()

    def stop(self) -> None:
        """Cancel the refresh task immediately; no-op if none is running."""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info(f"Live tracking stopped for {self._destination!r}")

    async def shutdown(self) -> None:
        """Cancel the refresh task and wait for it to finish."""
        task = self._task
        self.stop()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def status(self) -> LiveStatus:
        return LiveStatus(
            active=self.active,
            destination=self._destination,
            interval_s=self._interval_s,
            consecutive_failures=self._consecutive_failures,
            degraded=self.degraded,
            last_refresh_at=self._last_refresh_at,
        )

    async def refresh_once(self) -> None:
        """Run one refresh of the last-known destination, absorbing any failure."""
        analysis = self._planner.current_analysis
        if analysis is not None:
            self._destination = analysis.destination
        if not self._destination:
            return

        try:
            state = await self._planner.search(self._destination, auto_refresh=True)
        except Exception:
            logger.exception(f"Live refresh of {self._destination!r} raised")
            succeeded = False
        else:
            if state is None:
                return
            succeeded = state.status == "succeeded"

        if succeeded:
            if self.degraded:
                logger.info(f"Live tracking of {self._destination!r} recovered")
            self._consecutive_failures = 0
            self._last_refresh_at = now_ms()
            return

        self._consecutive_failures += 1
        self._metrics.inc_live_failure()
        if self._consecutive_failures == self._failure_threshold:
            logger.warning(
                f"Live tracking of {self._destination!r} degraded after "
                f"{self._consecutive_failures} consecutive failed refreshes"
            )

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_s)
            await self.refresh_once()
