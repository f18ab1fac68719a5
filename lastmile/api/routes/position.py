"""Device position reporting."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from lastmile.api.deps import Services, get_services
from lastmile.geo.provider import ReportedPositionProvider
from lastmile.models.common import Geo

router = APIRouter(prefix="/position")


class PositionReport(BaseModel):
    """Request body for POST /position."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


def _reported_provider(services: Services) -> ReportedPositionProvider:
    provider = services.geolocation
    if not isinstance(provider, ReportedPositionProvider):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Position is resolved server-side; reports are not accepted",
        )
    return provider


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def report_position(
    report: PositionReport,
    services: Annotated[Services, Depends(get_services)],
) -> None:
    """Record the device's latest position fix."""
    _reported_provider(services).report(Geo(lat=report.latitude, lon=report.longitude))


@router.post("/denied", status_code=status.HTTP_204_NO_CONTENT)
async def report_permission_denied(services: Annotated[Services, Depends(get_services)]) -> None:
    """Record that the user refused location access."""
    _reported_provider(services).deny()
