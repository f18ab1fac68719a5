"""Trip search endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from lastmile.api.deps import Services, get_services
from lastmile.geo.provider import ReportedPositionProvider
from lastmile.models.common import Geo
from lastmile.search.state import SearchFailedError, SearchState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips")


class SearchRequest(BaseModel):
    """Request body for POST /trips/search."""

    destination: str = Field(..., min_length=1, description="Where to, as typed")
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def _both_or_neither(self) -> "SearchRequest":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self


@router.post("/search", response_model=SearchState, response_model_exclude_none=True)
async def search(
    request: SearchRequest,
    services: Annotated[Services, Depends(get_services)],
) -> SearchState:
    """Run an interactive search and return its final state.

    A position in the body is recorded as the device's latest fix first.
    Returns 422 for a blank destination and 502 when the search fails.
    """
    if request.latitude is not None and request.longitude is not None:
        if isinstance(services.geolocation, ReportedPositionProvider):
            services.geolocation.report(Geo(lat=request.latitude, lon=request.longitude))
        else:
            logger.info("Ignoring client position: geolocation is resolved server-side")

    try:
        state = await services.planner.search(request.destination)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except SearchFailedError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "reason": e.reason,
                "message": "Intelligence failure: could not fetch trip data. Please try again.",
            },
        ) from e

    if state is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Search produced no result",
        )
    return state


@router.get("/current", response_model=SearchState, response_model_exclude_none=True)
async def current(services: Annotated[Services, Depends(get_services)]) -> SearchState:
    """Return the latest search state (pending, partial, succeeded or failed)."""
    state = services.planner.current
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No search yet")
    return state
