"""Live tracking endpoints ("on my way")."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from lastmile.api.deps import Services, get_services
from lastmile.search.live import LiveStatus

router = APIRouter(prefix="/live")


@router.post("/start", response_model=LiveStatus)
async def start(services: Annotated[Services, Depends(get_services)]) -> LiveStatus:
    """Start auto-refreshing the current analysis (restarts if already running)."""
    try:
        return services.live.start()
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.post("/stop", response_model=LiveStatus)
async def stop(services: Annotated[Services, Depends(get_services)]) -> LiveStatus:
    """End the trip: stop auto-refreshing."""
    services.live.stop()
    return services.live.status()


@router.get("", response_model=LiveStatus)
async def live_status(services: Annotated[Services, Depends(get_services)]) -> LiveStatus:
    """Current live tracking status."""
    return services.live.status()
