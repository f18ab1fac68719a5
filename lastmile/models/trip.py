"""Complete, displayable trip analysis (schema version 1)."""

from typing import Any

from pydantic import Field, field_validator

from lastmile.models.common import (
    CamelModel,
    EntranceType,
    TrafficStatus,
    TrafficTrend,
    normalize_entrance_type,
    normalize_traffic_status,
    optional_text,
)

SCHEMA_VERSION = 1


class ParkingLot(CamelModel):
    """Parking candidate near the destination."""

    name: str = Field(..., min_length=1)
    walk_time_mins: float = Field(..., ge=0, description="Walk from the lot to the destination")
    entrance_type: EntranceType = EntranceType.entrance
    distance_from_dest: str | None = None

    @field_validator("entrance_type", mode="before")
    @classmethod
    def _normalize_entrance(cls, value: Any) -> EntranceType:
        return normalize_entrance_type(value)


class GroundingSource(CamelModel):
    """Citation the reasoning service used as evidence."""

    title: str
    uri: str


class DrivingIntel(CamelModel):
    """Driving leg of the trip."""

    drive_time_mins: float = Field(..., gt=0)
    traffic_status: TrafficStatus = TrafficStatus.moderate
    traffic_trend: TrafficTrend = TrafficTrend.stable
    parking_options: list[ParkingLot] = Field(default_factory=list)
    total_time_mins: float = Field(..., gt=0, description="Drive time plus walk from first lot")

    @field_validator("traffic_status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> TrafficStatus:
        return normalize_traffic_status(value)


class WalkingIntel(CamelModel):
    """Walking leg and conditions at the destination."""

    walk_time_mins: float = Field(..., gt=0)
    temperature: float | None = Field(None, description="Celsius")
    weather_condition: str | None = None
    weather_alert: str | None = Field(None, description="Absent means no hazard")
    is_recommended: bool = True
    recommendation_reason: str | None = None

    @field_validator("weather_condition", "weather_alert", "recommendation_reason", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return optional_text(value)


class TripAnalysis(CamelModel):
    """Merged result of the core and deep queries."""

    destination: str
    timestamp: int = Field(..., description="Epoch milliseconds at merge time")
    is_open_at_arrival: bool = True
    closing_time: str | None = None
    next_opening_time: str | None = None
    driving: DrivingIntel
    walking: WalkingIntel
    grounding_sources: list[GroundingSource] = Field(default_factory=list)
