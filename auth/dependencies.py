"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Clients authenticate with an `Authorization: Bearer <access token>` header.
The token is verified by AuthService.authenticate(), which also reloads the
user so a role change or account deletion takes effect on the next request
rather than when the token expires.

try_get_current_user() is the soft variant (returns None on failure) used by
public routes that personalise output for signed-in readers.
get_current_user() wraps it and raises HTTP 401 if unauthenticated.
require_role(*roles) wraps get_current_user() and raises HTTP 403 otherwise.

Layer rule: no imports from api/ or content/.
  auth/dependencies.py may import from fastapi (for Depends/HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import HTTPException, Request

from auth.models import User
from auth.service import AuthService
from core.errors import InvalidToken


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[7:].strip() or None
    return None


def try_get_current_user(request: Request) -> User | None:
    """Return the authenticated User, or None. Never raises."""
    token = _bearer_token(request)
    if not token:
        return None
    auth_service: AuthService = request.app.state.auth_service
    try:
        return auth_service.authenticate(token)
    except InvalidToken:
        return None


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Invalid or expired token."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_role(*roles: str) -> Callable[[Request], User]:
    """Build a dependency that admits only users holding one of `roles`.

    Use as a FastAPI dependency:
        @router.post("/admin-only")
        async def route(user: User = Depends(require_role("admin"))): ...
    """

    def dependency(request: Request) -> User:
        user = get_current_user(request)
        if user.role not in roles:
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": "Insufficient permissions."},
            )
        return user

    return dependency


require_admin = require_role("admin")
require_author = require_role("author", "admin")
