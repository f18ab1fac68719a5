"""Common types, enums and label normalizers shared across all models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Labels a model may use for "no value" in free-text fields
_NULL_LABELS = {"", "null", "none", "n/a", "na", "unknown"}


class CamelModel(BaseModel):
    """Base model whose JSON field names are camelCase.

    Python attributes stay snake_case; either spelling is accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class TrafficStatus(str, Enum):
    """Current traffic on the driving route."""

    clear = "Clear"
    moderate = "Moderate"
    heavy = "Heavy"
    gridlock = "Gridlock"


class TrafficTrend(str, Enum):
    """Direction traffic is heading."""

    improving = "improving"
    stable = "stable"
    worsening = "worsening"


class EntranceType(str, Enum):
    """How a parking lot is entered."""

    gate = "Gate"
    garage = "Garage"
    entrance = "Entrance"


# Older labels the model still produces, folded into the four-value scale
_LEGACY_TRAFFIC = {
    "open": TrafficStatus.clear,
    "light": TrafficStatus.clear,
    "semi-congested": TrafficStatus.moderate,
    "semi congested": TrafficStatus.moderate,
    "heavy traffic": TrafficStatus.heavy,
    "congested": TrafficStatus.heavy,
}


def normalize_traffic_status(value: Any) -> TrafficStatus:
    """Map a free-text traffic label onto TrafficStatus.

    Missing, "unknown" and unrecognised labels become Moderate.
    """
    if isinstance(value, TrafficStatus):
        return value
    if not isinstance(value, str):
        return TrafficStatus.moderate

    label = value.strip().lower()
    for status in TrafficStatus:
        if status.value.lower() == label:
            return status
    return _LEGACY_TRAFFIC.get(label, TrafficStatus.moderate)


def normalize_traffic_trend(value: Any) -> TrafficTrend | None:
    """Map a free-text trend label onto TrafficTrend, or None if unrecognised."""
    if isinstance(value, TrafficTrend):
        return value
    if not isinstance(value, str):
        return None
    try:
        return TrafficTrend(value.strip().lower())
    except ValueError:
        return None


def normalize_entrance_type(value: Any) -> EntranceType:
    """Map a free-text entrance label onto EntranceType (default Entrance)."""
    if isinstance(value, EntranceType):
        return value
    if isinstance(value, str):
        label = value.strip().lower()
        for entrance in EntranceType:
            if entrance.value.lower() == label:
                return entrance
    return EntranceType.entrance


def optional_text(value: Any) -> Any:
    """Collapse blank and null-like labels to None; leave anything else alone."""
    if isinstance(value, str) and value.strip().lower() in _NULL_LABELS:
        return None
    return value
