"""Application wiring and FastAPI dependencies.

All collaborators are created once at start-up and kept on ``app.state``;
routes reach them through ``get_services``.
"""

from dataclasses import dataclass

from fastapi import Request

from lastmile.config import Settings
from lastmile.geo.provider import GeolocationProvider, build_geolocation_provider
from lastmile.intel.client import TripIntelligenceClient
from lastmile.llm.client import ReasoningService, get_reasoning_service
from lastmile.search.live import LiveTracker
from lastmile.search.planner import TripPlanner
from lastmile.store.history import SearchHistory
from lastmile.store.kv import KeyValueStore, build_key_value_store
from lastmile.store.session import SessionStore
from lastmile.store.sharing import SnapshotService
from lastmile.utils.metrics import PrometheusIntelMetrics


@dataclass
class Services:
    """Process-wide collaborators."""

    settings: Settings
    kv: KeyValueStore
    session: SessionStore
    history: SearchHistory
    snapshots: SnapshotService
    geolocation: GeolocationProvider
    reasoning: ReasoningService
    intel: TripIntelligenceClient
    planner: TripPlanner
    live: LiveTracker


async def build_services(
    settings: Settings,
    *,
    kv: KeyValueStore | None = None,
    reasoning: ReasoningService | None = None,
    geolocation: GeolocationProvider | None = None,
) -> Services:
    """Create every collaborator from settings; any may be supplied instead.

    Args:
        settings: Application settings
        kv: Key-value store override
        reasoning: Reasoning service override
        geolocation: Geolocation provider override

    Returns:
        Wired Services
    """
    kv = kv or build_key_value_store(settings)
    reasoning = reasoning or await get_reasoning_service(settings)
    geolocation = geolocation or build_geolocation_provider(settings)
    metrics = PrometheusIntelMetrics()

    session = SessionStore(kv)
    history = SearchHistory(kv, limit=settings.history_limit)
    snapshots = SnapshotService(kv, session)
    intel = TripIntelligenceClient(
        reasoning,
        temperature=settings.reasoning_temperature,
        metrics=metrics,
    )
    planner = TripPlanner(
        intel,
        geolocation,
        history,
        geolocation_timeout_ms=settings.geolocation_timeout_ms,
        high_accuracy=settings.geolocation_high_accuracy,
        metrics=metrics,
    )
    live = LiveTracker(
        planner,
        interval_s=settings.live_refresh_interval_s,
        failure_threshold=settings.live_failure_threshold,
        metrics=metrics,
    )

    return Services(
        settings=settings,
        kv=kv,
        session=session,
        history=history,
        snapshots=snapshots,
        geolocation=geolocation,
        reasoning=reasoning,
        intel=intel,
        planner=planner,
        live=live,
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the wired Services."""
    services: Services = request.app.state.services
    return services
