"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in content/models.py -- dataclasses own domain shape; stores and services do
the work.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

from dataclasses import dataclass, field

ROLES = ("reader", "author", "admin")


@dataclass
class User:
    """An identity record.

    password_hash is None for Google-only accounts (they have no local
    password). google_oauth_id is None until the user signs in with Google,
    at which point link_google() fills it in. Both may be present, which
    enables either login path for the same account.

    reset_token / reset_token_expires are a single-use, time-boxed grant:
    stamped by forgot-password (1h) or admin invitation (24h) and cleared on
    successful reset.
    """

    name: str
    email: str
    role: str = "reader"  # "reader" | "author" | "admin"
    id: int | None = None
    password_hash: str | None = None
    avatar_url: str | None = None
    google_oauth_id: str | None = None
    preferences: dict = field(default_factory=dict)
    email_verified: bool = False
    reset_token: str | None = None
    reset_token_expires: str | None = None  # ISO 8601
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class Session:
    """A refresh-token grant.

    Exactly one row per issued refresh token; a user may hold several at once
    (one per device). The row's existence IS the token's validity -- deleting
    it revokes the token immediately, unlike stateless access tokens.
    """

    user_id: int
    refresh_token: str
    expires_at: str  # ISO 8601
    id: int | None = None
    created_at: str | None = None


@dataclass
class OAuthProfile:
    """Normalized identity returned by the Google OAuth callback."""

    google_id: str
    email: str
    name: str
    avatar: str | None = None


@dataclass(frozen=True)
class AccessTokenPayload:
    """Identity claims carried inside a signed access token."""

    user_id: int
    email: str
    role: str


@dataclass
class AuthResult:
    """Outcome of register / login / OAuth: the user projection plus a token pair."""

    user: User
    access_token: str
    refresh_token: str


@dataclass
class RefreshResult:
    """Outcome of a refresh. refresh_token is the rotated token, or None
    when rotation is disabled and the caller keeps its current token."""

    access_token: str
    refresh_token: str | None = None
