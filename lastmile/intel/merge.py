"""Merge core and deep partial results into one TripAnalysis.

This is a pure, deterministic mapping function with no I/O; only the
timestamp depends on the clock, and it can be injected.
"""

import time

from lastmile.models.common import TrafficTrend
from lastmile.models.intel import CoreIntel, DeepIntel
from lastmile.models.trip import DrivingIntel, TripAnalysis, WalkingIntel


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def merge_trip_analysis(
    destination: str,
    core: CoreIntel,
    deep: DeepIntel,
    *,
    timestamp_ms: int | None = None,
) -> TripAnalysis:
    """Combine both partial results, applying defaults and derived fields.

    Args:
        destination: Destination text as the user typed it
        core: Validated core result (drive and walk times present)
        deep: Deep result, possibly empty
        timestamp_ms: Merge instant; defaults to now

    Returns:
        Complete TripAnalysis
    """
    # Validated upstream; absence here is a caller bug
    assert core.driving.drive_time_mins, "core.driving.drive_time_mins must be set"

    deep_driving = deep.driving
    deep_walking = deep.walking

    parking_options = list(deep_driving.parking_options) if deep_driving else []
    walk_from_parking = parking_options[0].walk_time_mins if parking_options else 0
    traffic_trend = (deep_driving.traffic_trend if deep_driving else None) or TrafficTrend.stable

    is_recommended = deep_walking.is_recommended if deep_walking else None

    return TripAnalysis(
        destination=core.destination or destination,
        timestamp=timestamp_ms if timestamp_ms is not None else now_ms(),
        is_open_at_arrival=True if core.is_open_at_arrival is None else core.is_open_at_arrival,
        closing_time=core.closing_time,
        next_opening_time=core.next_opening_time,
        driving=DrivingIntel(
            drive_time_mins=core.driving.drive_time_mins,
            traffic_status=core.driving.traffic_status,
            traffic_trend=traffic_trend,
            parking_options=parking_options,
            total_time_mins=core.driving.drive_time_mins + walk_from_parking,
        ),
        walking=WalkingIntel(
            walk_time_mins=core.walking.walk_time_mins,
            temperature=deep_walking.temperature if deep_walking else None,
            weather_condition=deep_walking.weather_condition if deep_walking else None,
            weather_alert=deep_walking.weather_alert if deep_walking else None,
            is_recommended=True if is_recommended is None else is_recommended,
            recommendation_reason=deep_walking.recommendation_reason if deep_walking else None,
        ),
        grounding_sources=list(deep.grounding_sources),
    )
