"""
api/routes/v1/auth.py -- Registration, login, token and password-reset endpoints.

Routes:
  POST /api/v1/auth/register         -- create a reader account; returns token pair
  POST /api/v1/auth/login            -- email + password; returns token pair
  POST /api/v1/auth/refresh          -- refresh token -> new access token
  POST /api/v1/auth/logout           -- revoke one session (idempotent)
  POST /api/v1/auth/forgot-password  -- always the same generic message
  POST /api/v1/auth/reset-password   -- consume reset token; revokes all sessions
  GET  /api/v1/auth/google           -- redirect to Google consent screen
  GET  /api/v1/auth/google/callback  -- code exchange; redirect to the frontend

Security:
  [H2] Credential endpoints share the AUTH_RATE_LIMIT per-IP limit.
  [C1] Login and forgot-password answers never reveal whether an email exists.
  [M5] Cache-Control: no-store on every response that carries tokens.
  The Google callback hands tokens to the frontend in the URL fragment, which
  browsers never send to servers, so they stay out of access logs.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from api.limiter import auth_limit, limiter
from api.models import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    ResetPasswordRequest,
    user_response,
)
from auth.models import AuthResult
from auth.oauth import extract_google_profile
from auth.service import AuthService
from core.config import get_settings

logger = logging.getLogger("inkwell.api.auth")

# Auth policy: every route here is public -- these endpoints establish identity.
router = APIRouter()


def _auth_response(result: AuthResult, response: Response) -> AuthResponse:
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return AuthResponse(
        user=user_response(result.user),
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


# ---------------------------------------------------------------------------
# Password-based flows
# ---------------------------------------------------------------------------


@limiter.limit(auth_limit)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, response: Response, body: RegisterRequest) -> AuthResponse:
    """Create a reader account and sign it in."""
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.register(body.name, body.email, body.password)
    return _auth_response(result, response)


@limiter.limit(auth_limit)  # [H2]
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, response: Response, body: LoginRequest) -> AuthResponse:
    """Authenticate with email and password.

    Unknown email, Google-only account and wrong password all produce the
    same 401 invalid_credentials [C1].
    """
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.login(body.email, body.password)
    return _auth_response(result, response)


@limiter.limit(auth_limit)  # [H2]
@router.post("/auth/refresh", response_model=RefreshResponse)
def refresh(request: Request, response: Response, body: RefreshRequest) -> RefreshResponse:
    """Exchange a refresh token for a new access token."""
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.refresh(body.refresh_token)
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return RefreshResponse(access_token=result.access_token, refresh_token=result.refresh_token)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request, body: RefreshRequest) -> MessageResponse:
    """Revoke the session behind a refresh token. Unknown tokens still succeed."""
    auth_service: AuthService = request.app.state.auth_service
    return MessageResponse(**auth_service.logout(body.refresh_token))


@limiter.limit(auth_limit)  # [H2]
@router.post("/auth/forgot-password", response_model=MessageResponse)
def forgot_password(request: Request, body: ForgotPasswordRequest) -> MessageResponse:
    """Start a password reset. The answer is identical whether or not the email exists [C1]."""
    auth_service: AuthService = request.app.state.auth_service
    return MessageResponse(**auth_service.forgot_password(body.email))


@limiter.limit(auth_limit)  # [H2]
@router.post("/auth/reset-password", response_model=MessageResponse)
def reset_password(request: Request, body: ResetPasswordRequest) -> MessageResponse:
    """Set a new password with a reset token and sign out every session."""
    auth_service: AuthService = request.app.state.auth_service
    return MessageResponse(**auth_service.reset_password(body.token, body.new_password))


# ---------------------------------------------------------------------------
# Google sign-in
# ---------------------------------------------------------------------------


def _frontend_redirect(path: str, params: dict, fragment: bool = False) -> RedirectResponse:
    base = get_settings().frontend_url.rstrip("/")
    separator = "#" if fragment else "?"
    resp = RedirectResponse(f"{base}{path}{separator}{urlencode(params)}", status_code=302)
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


def _google_client(request: Request):
    if not get_settings().google_oauth_enabled:
        raise HTTPException(
            status_code=404,
            detail={"code": "oauth_disabled", "message": "Google sign-in is not configured."},
        )
    return request.app.state.oauth.create_client("google")


@router.get("/auth/google")
async def google_login(request: Request) -> RedirectResponse:
    """Redirect the browser to Google's authorization page."""
    client = _google_client(request)
    redirect_uri = str(request.url_for("google_callback"))
    return await client.authorize_redirect(request, redirect_uri)


@router.get("/auth/google/callback", name="google_callback")
async def google_callback(request: Request) -> RedirectResponse:
    """Finish Google sign-in and hand the token pair to the frontend.

    Flow:
      1. Exchange the authorization code (authlib checks the state value).
      2. Extract a VERIFIED email and the Google subject id [H1].
      3. AuthService.oauth_login(): match by Google id, then by email, else create.
      4. Redirect to FRONTEND_URL/auth/callback#access_token=...&refresh_token=...
    """
    client = _google_client(request)
    try:
        token = await client.authorize_access_token(request)
    except OAuthError:
        logger.exception("Google token exchange failed")
        return _frontend_redirect("/login", {"error": "oauth_failed"})

    try:
        profile = extract_google_profile(token)
    except ValueError:
        logger.warning("Google sign-in rejected: unverified or missing email")
        return _frontend_redirect("/login", {"error": "oauth_failed"})

    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.oauth_login(profile)
    return _frontend_redirect(
        "/auth/callback",
        {"access_token": result.access_token, "refresh_token": result.refresh_token},
        fragment=True,
    )
