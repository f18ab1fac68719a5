"""Models package - re-exports for convenience."""

from lastmile.models.common import (
    CamelModel,
    EntranceType,
    Geo,
    TrafficStatus,
    TrafficTrend,
)
from lastmile.models.intel import (
    CoreDriving,
    CoreIntel,
    CoreWalking,
    DeepDriving,
    DeepIntel,
    DeepWalking,
)
from lastmile.models.sharing import SharedSnapshot, User, normalize_username
from lastmile.models.trip import (
    SCHEMA_VERSION,
    DrivingIntel,
    GroundingSource,
    ParkingLot,
    TripAnalysis,
    WalkingIntel,
)

__all__ = [
    # Common
    "CamelModel",
    "Geo",
    "TrafficStatus",
    "TrafficTrend",
    "EntranceType",
    # Partial results
    "CoreDriving",
    "CoreWalking",
    "CoreIntel",
    "DeepDriving",
    "DeepWalking",
    "DeepIntel",
    # Trip analysis
    "SCHEMA_VERSION",
    "ParkingLot",
    "GroundingSource",
    "DrivingIntel",
    "WalkingIntel",
    "TripAnalysis",
    # Sharing
    "User",
    "SharedSnapshot",
    "normalize_username",
]
