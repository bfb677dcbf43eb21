# =============================================================================
# app/routers/users.py - User Lookup Endpoints
# =============================================================================
# Profile of the caller, the messaging user picker and public user info.
# All endpoints require authentication.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel

from app.auth import get_current_user, AuthUser
from core.models.users import Role, UserSummary
from core.services.user_service import UserService

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class MyProfileResponse(BaseModel):
    """The caller's users row and role profile."""
    role: Role
    user: dict[str, Any]
    profile: dict[str, Any] | None = None


class AvailableUsersResponse(BaseModel):
    users: list[UserSummary]
    count: int


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/me/profile", response_model=MyProfileResponse)
async def get_my_profile(user: AuthUser = Depends(get_current_user)):
    """
    Get the caller's user row plus their role profile.

    `profile` is null for plain users and admins, and for roles whose
    onboarding form hasn't been approved yet.
    """
    data = UserService.get_me(user.id, user.role)
    return MyProfileResponse(role=user.role, **data)


@router.get("/available", response_model=AvailableUsersResponse)
async def list_available_users(
    user: AuthUser = Depends(get_current_user),
    role: Annotated[Role | None, Query(description="Only users with this role")] = None,
):
    """
    List users the caller can message (everyone except the caller).
    """
    users = UserService.list_available(user.id, role)
    return AvailableUsersResponse(
        users=[UserSummary(**u) for u in users],
        count=len(users),
    )


@router.get("/{user_id}", response_model=UserSummary)
async def get_user(
    user_id: Annotated[UUID, Path(description="User UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Get a user's public fields (id, name, image, role).

    Raises:
        404: User not found
    """
    return UserSummary(**UserService.get_public_user(user_id))
