"""Sign-in endpoints - username only, one user per device."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from lastmile.api.deps import Services, get_services
from lastmile.models.sharing import User

router = APIRouter(prefix="/session")


class LoginRequest(BaseModel):
    """Request body for POST /session."""

    username: str = Field(..., min_length=1, description="Handle, with or without a leading @")


@router.post("", response_model=User)
async def login(
    request: LoginRequest,
    services: Annotated[Services, Depends(get_services)],
) -> User:
    """Sign in; the username is stored lowercase without "@"."""
    try:
        return services.session.login(request.username)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.get("", response_model=User)
async def current_user(services: Annotated[Services, Depends(get_services)]) -> User:
    """Return the signed-in user."""
    user = services.session.current_user()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not signed in")
    return user


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def logout(services: Annotated[Services, Depends(get_services)]) -> None:
    """Sign out and stop live tracking."""
    services.live.stop()
    services.session.logout()
