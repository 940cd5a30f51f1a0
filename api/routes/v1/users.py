"""
api/routes/v1/users.py -- Self-service account endpoints.

Routes:
  GET    /api/v1/users/me           -- current profile
  PUT    /api/v1/users/me           -- update name, avatar, preferences
  PUT    /api/v1/users/me/password  -- change password (revokes all sessions)
  DELETE /api/v1/users/me           -- delete account and its sessions

Every route acts on the caller's own account; there is no user id in the
path, so one user can never address another's profile here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import MessageResponse, PasswordChange, ProfileUpdate, UserResponse, user_response
from auth.accounts import AccountService
from auth.dependencies import get_current_user
from auth.models import User

# Auth policy: all routes require get_current_user.
router = APIRouter()


@router.get("/users/me", response_model=UserResponse)
def get_me(request: Request, current_user: User = Depends(get_current_user)) -> UserResponse:
    accounts: AccountService = request.app.state.account_service
    return user_response(accounts.get_profile(current_user.id))


@router.put("/users/me", response_model=UserResponse)
def update_me(
    request: Request,
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Partial profile update. Preferences are merged, not replaced."""
    accounts: AccountService = request.app.state.account_service
    preferences = body.preferences.model_dump(exclude_none=True) if body.preferences is not None else None
    updated = accounts.update_profile(
        current_user.id,
        name=body.name,
        avatar_url=body.avatar_url,
        preferences=preferences,
    )
    return user_response(updated)


@router.put("/users/me/password", response_model=MessageResponse)
def change_password(
    request: Request,
    body: PasswordChange,
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    accounts: AccountService = request.app.state.account_service
    return MessageResponse(**accounts.change_password(current_user.id, body.current_password, body.new_password))


@router.delete("/users/me", response_model=MessageResponse)
def delete_me(request: Request, current_user: User = Depends(get_current_user)) -> MessageResponse:
    accounts: AccountService = request.app.state.account_service
    return MessageResponse(**accounts.delete_account(current_user.id))
