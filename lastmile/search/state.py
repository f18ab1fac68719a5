"""Inspectable state of a trip search."""

from typing import Literal

from pydantic import Field

from lastmile.models.common import CamelModel
from lastmile.models.intel import CoreIntel
from lastmile.models.trip import TripAnalysis

# pending: waiting on position or both queries
# partial: core resolved, deep outstanding
# succeeded: both resolved and merged
# failed: position or core query failed
SearchStatus = Literal["pending", "partial", "succeeded", "failed"]

SearchKind = Literal["interactive", "auto_refresh", "snapshot"]


class SearchFailure(CamelModel):
    """Why a search failed."""

    reason: str
    message: str


class SearchState(CamelModel):
    """One search's progress, replaced as it moves through its phases."""

    sequence: int
    destination: str
    kind: SearchKind = "interactive"
    status: SearchStatus = "pending"
    started_at: int = Field(..., description="Epoch milliseconds")
    core: CoreIntel | None = None
    analysis: TripAnalysis | None = None
    error: SearchFailure | None = None
    duration_s: float | None = None


class SearchFailedError(Exception):
    """Interactive search could not produce an analysis."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
