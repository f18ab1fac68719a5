"""Shared pytest fixtures for all test suites."""

import pytest

from lastmile.llm.client import Capability, ReasoningReply, ReasoningRequest
from lastmile.models import (
    DrivingIntel,
    GroundingSource,
    ParkingLot,
    TripAnalysis,
    WalkingIntel,
)


class ScriptedReasoningService:
    """Reasoning service that replays canned replies per query kind.

    Core queries (no web search) take ``core``; deep queries take ``deep``.
    A value that is an exception instance is raised instead of returned.
    Every request is kept in ``requests`` for assertions.
    """

    name = "scripted"

    def __init__(self, core: object, deep: object) -> None:
        self.core = core
        self.deep = deep
        self.requests: list[ReasoningRequest] = []

    async def generate(self, request: ReasoningRequest) -> ReasoningReply:
        self.requests.append(request)
        reply = self.deep if Capability.WEB_SEARCH in request.capabilities else self.core
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, ReasoningReply):
            return reply
        return ReasoningReply(text=str(reply), grounding_chunks=[])


CORE_TEXT = (
    '```json\n{"destination": "Ferry Building", "isOpenAtArrival": true, '
    '"closingTime": "7:00 PM", "driving": {"driveTimeMins": 12, "trafficStatus": "Clear"}, '
    '"walking": {"walkTimeMins": 5}}\n```'
)

DEEP_TEXT = (
    '{"driving": {"trafficTrend": "improving", "parkingOptions": ['
    '{"name": "Embarcadero Garage", "walkTimeMins": 4, "entranceType": "Garage"}]}, '
    '"walking": {"temperature": 17, "weatherCondition": "Fog", "isRecommended": true, '
    '"recommendationReason": "Mild and calm"}}'
)


@pytest.fixture
def core_text() -> str:
    """Valid core reply wrapped in a code fence."""
    return CORE_TEXT


@pytest.fixture
def deep_text() -> str:
    """Valid deep reply."""
    return DEEP_TEXT


@pytest.fixture
def scripted_service() -> ScriptedReasoningService:
    """Scripted service returning valid core and deep replies."""
    return ScriptedReasoningService(core=CORE_TEXT, deep=DEEP_TEXT)


@pytest.fixture
def sample_analysis() -> TripAnalysis:
    """Create a complete trip analysis for testing."""
    return TripAnalysis(
        destination="Ferry Building",
        timestamp=1_700_000_000_000,
        is_open_at_arrival=True,
        closing_time="7:00 PM",
        driving=DrivingIntel(
            drive_time_mins=12,
            traffic_status="Clear",
            traffic_trend="improving",
            parking_options=[
                ParkingLot(name="Embarcadero Garage", walk_time_mins=4, entrance_type="Garage"),
            ],
            total_time_mins=16,
        ),
        walking=WalkingIntel(
            walk_time_mins=5,
            temperature=17,
            weather_condition="Fog",
            is_recommended=True,
            recommendation_reason="Mild and calm",
        ),
        grounding_sources=[GroundingSource(title="Ferry Building", uri="https://maps.google.com/?cid=1")],
    )


@pytest.fixture
def make_service() -> type[ScriptedReasoningService]:
    """Factory for scripted services with custom replies."""
    return ScriptedReasoningService
