"""
api/routes/v1/admin.py -- Dashboard metrics and user administration.

Routes:
  GET  /api/v1/admin/dashboard            -- content + user totals (author/admin)
  GET  /api/v1/admin/users                -- search/filter users (admin)
  PUT  /api/v1/admin/users/{user_id}/role -- change a role (admin)
  POST /api/v1/admin/users                -- invite a user (admin)

Security:
  [M4] An admin cannot change their own role. Demoting yourself could leave
       the site with no admin and no recovery path without DB access.
  The invitation reset link is returned to the admin as well as mailed, so
  accounts can be handed over when outbound email is not configured.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.models import (
    AdminUserCreate,
    DashboardMetrics,
    DashboardResponse,
    InviteResponse,
    RoleEnum,
    RoleUpdate,
    UserListResponse,
    UserResponse,
    activity_response,
    article_response,
    user_response,
)
from auth.accounts import AccountService
from auth.dependencies import require_admin, require_author
from auth.models import User
from content.dashboard import DashboardService
from core.text import pagination_meta

# Auth policy:
# - GET /admin/dashboard: author or admin (require_author)
# - everything under /admin/users: admin only (require_admin)
router = APIRouter()


@router.get("/admin/dashboard", response_model=DashboardResponse)
def dashboard(request: Request, current_user: User = Depends(require_author)) -> DashboardResponse:
    dashboard_service: DashboardService = request.app.state.dashboard_service
    accounts: AccountService = request.app.state.account_service
    content = dashboard_service.content_metrics()
    return DashboardResponse(
        metrics=DashboardMetrics(
            total_articles=content["total_articles"],
            total_categories=content["total_categories"],
            total_page_views=content["total_page_views"],
            total_users=accounts.count_users(),
        ),
        monthly_views=content["monthly_views"],
        recent_articles=[article_response(a) for a in content["recent_articles"]],
        recent_activity=[activity_response(e) for e in content["recent_activity"]],
    )


@router.get("/admin/users", response_model=UserListResponse)
def list_users(
    request: Request,
    search: Optional[str] = Query(default=None, max_length=100),
    role: Optional[RoleEnum] = None,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(require_admin),
) -> UserListResponse:
    accounts: AccountService = request.app.state.account_service
    users, total = accounts.list_users(
        search=search,
        role=role.value if role else None,
        limit=limit,
        offset=offset,
    )
    return UserListResponse(users=[user_response(u) for u in users], pagination=pagination_meta(total, limit, offset))


@router.put("/admin/users/{user_id}/role", response_model=UserResponse)
def update_role(
    request: Request,
    user_id: int,
    body: RoleUpdate,
    current_user: User = Depends(require_admin),
) -> UserResponse:
    if user_id == current_user.id:  # [M4]
        raise HTTPException(
            status_code=400,
            detail={"code": "self_role_change", "message": "You cannot change your own role."},
        )
    accounts: AccountService = request.app.state.account_service
    return user_response(accounts.update_role(user_id, body.role.value))


@router.post("/admin/users", response_model=InviteResponse, status_code=201)
def invite_user(
    request: Request,
    body: AdminUserCreate,
    current_user: User = Depends(require_admin),
) -> InviteResponse:
    """Create an account with a random password and a 24-hour set-password link."""
    accounts: AccountService = request.app.state.account_service
    user, link = accounts.invite_user(body.name, body.email, body.role.value, send_invitation=body.send_invitation)
    return InviteResponse(user=user_response(user), reset_link=link)
