"""Partial results returned by the core and deep queries.

These mirror the JSON shapes the prompts ask for. Every default applied
before merging lives here or in ``lastmile.intel.merge``:

- core ``trafficStatus``: Moderate when missing, "unknown" or unrecognised
- core ``isOpenAtArrival``: None when missing or not a yes/no label, True after merging
- deep ``trafficTrend``: None when missing or unrecognised, "stable" after merging
- deep ``parkingOptions``: entries that fail validation are dropped
- deep ``isRecommended``: None here, True after merging
- deep ``groundingSources``: empty list
"""

import logging
from typing import Any

from pydantic import Field, ValidationError, field_validator

from lastmile.models.common import (
    CamelModel,
    TrafficStatus,
    TrafficTrend,
    normalize_traffic_status,
    normalize_traffic_trend,
    optional_text,
)
from lastmile.models.trip import GroundingSource, ParkingLot

logger = logging.getLogger(__name__)

# Anything else (null-like or noisy) leaves the flag unset
_BOOL_LABELS = {"true": True, "yes": True, "open": True, "false": False, "no": False, "closed": False}


class CoreDriving(CamelModel):
    drive_time_mins: float = Field(..., gt=0)
    traffic_status: TrafficStatus = TrafficStatus.moderate

    @field_validator("traffic_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> TrafficStatus:
        return normalize_traffic_status(value)


class CoreWalking(CamelModel):
    walk_time_mins: float = Field(..., gt=0)


class CoreIntel(CamelModel):
    """Fast query result: ETAs and opening status."""

    destination: str | None = None
    is_open_at_arrival: bool | None = None
    closing_time: str | None = None
    next_opening_time: str | None = None
    driving: CoreDriving
    walking: CoreWalking

    @field_validator("destination", "closing_time", "next_opening_time", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return optional_text(value)

    @field_validator("is_open_at_arrival", mode="before")
    @classmethod
    def _lenient_open_flag(cls, value: Any) -> bool | None:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return _BOOL_LABELS.get(value.strip().lower())
        return None


class DeepDriving(CamelModel):
    traffic_trend: TrafficTrend | None = None
    parking_options: list[ParkingLot] = Field(default_factory=list)

    @field_validator("traffic_trend", mode="before")
    @classmethod
    def _normalize_trend(cls, value: Any) -> TrafficTrend | None:
        return normalize_traffic_trend(value)

    @field_validator("parking_options", mode="before")
    @classmethod
    def _drop_invalid_lots(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        lots: list[Any] = []
        for entry in value:
            try:
                lots.append(ParkingLot.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Dropping invalid parking option {entry!r}: {e.error_count()} error(s)")
        return lots


class DeepWalking(CamelModel):
    temperature: float | None = None
    weather_condition: str | None = None
    weather_alert: str | None = None
    is_recommended: bool | None = None
    recommendation_reason: str | None = None

    @field_validator("weather_condition", "weather_alert", "recommendation_reason", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return optional_text(value)

    @field_validator("temperature", mode="before")
    @classmethod
    def _lenient_temperature(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return float(value.strip().rstrip("°CcF").strip())
            except ValueError:
                return None
        return value


class DeepIntel(CamelModel):
    """Slow query result: weather, parking and trend enrichment."""

    driving: DeepDriving | None = None
    walking: DeepWalking | None = None
    grounding_sources: list[GroundingSource] = Field(default_factory=list)
