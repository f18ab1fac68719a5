"""Snapshot sharing and inbox endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from lastmile.api.deps import Services, get_services
from lastmile.models.sharing import SharedSnapshot
from lastmile.search.state import SearchState

router = APIRouter()


class ShareRequest(BaseModel):
    """Request body for POST /share."""

    recipient: str = Field(..., min_length=1, description="Recipient handle, e.g. @alice")


@router.post("/share", response_model=SharedSnapshot, status_code=status.HTTP_201_CREATED)
async def share(
    request: ShareRequest,
    services: Annotated[Services, Depends(get_services)],
) -> SharedSnapshot:
    """Send a snapshot of the current analysis to another user."""
    analysis = services.planner.current_analysis
    if analysis is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No trip analysis to share")

    try:
        return services.snapshots.share(analysis, request.recipient)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.get("/inbox", response_model=list[SharedSnapshot])
async def inbox(services: Annotated[Services, Depends(get_services)]) -> list[SharedSnapshot]:
    """Snapshots received on this device, newest first."""
    return services.snapshots.inbox()


@router.delete("/inbox", status_code=status.HTTP_204_NO_CONTENT)
async def clear_inbox(services: Annotated[Services, Depends(get_services)]) -> None:
    """Remove every received snapshot."""
    services.snapshots.clear_inbox()


@router.post(
    "/inbox/{snapshot_id}/load",
    response_model=SearchState,
    response_model_exclude_none=True,
)
async def load_snapshot(
    snapshot_id: str,
    services: Annotated[Services, Depends(get_services)],
) -> SearchState:
    """Make a received snapshot the current analysis."""
    snapshot = services.snapshots.find(snapshot_id)
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Snapshot not found")
    return services.planner.load_snapshot(snapshot)
