"""Users and shared trip snapshots."""

from pydantic import ConfigDict, Field, field_validator

from lastmile.models.common import CamelModel
from lastmile.models.trip import TripAnalysis


def normalize_username(raw: str) -> str:
    """Normalize a handle: trim, drop a leading "@", lowercase.

    Args:
        raw: Username as typed (e.g. " @Alice ")

    Returns:
        Normalized username (e.g. "alice"), possibly empty
    """
    return raw.strip().lstrip("@").strip().lower()


class User(CamelModel):
    """Signed-in user on this device."""

    username: str = Field(..., min_length=1)

    @field_validator("username", mode="before")
    @classmethod
    def _normalize(cls, value: object) -> object:
        return normalize_username(value) if isinstance(value, str) else value


class SharedSnapshot(CamelModel):
    """Immutable copy of a trip analysis sent from one user to another."""

    model_config = ConfigDict(frozen=True)

    id: str
    from_: str = Field(..., alias="from", min_length=1)
    to: str = Field(..., min_length=1)
    data: TripAnalysis
    sent_at: int = Field(..., description="Epoch milliseconds")

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _normalize(cls, value: object) -> object:
        return normalize_username(value) if isinstance(value, str) else value
