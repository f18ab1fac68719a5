"""Search history endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from lastmile.api.deps import Services, get_services

router = APIRouter(prefix="/history")


@router.get("")
async def list_history(services: Annotated[Services, Depends(get_services)]) -> list[str]:
    """Recent destinations, most recent first."""
    return services.history.entries()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(services: Annotated[Services, Depends(get_services)]) -> None:
    """Forget all recent destinations."""
    services.history.clear()
