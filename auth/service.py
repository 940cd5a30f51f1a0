"""
auth/service.py -- Auth orchestrator: register, login, Google sign-in,
refresh, logout, forgot/reset password.

Each flow is a stateless method call; the only durable state is the users
and sessions rows behind the injected stores. AuthService holds no mutable
state of its own, so one instance is shared by every request (built in the
API lifespan) and tests construct their own with in-memory stores.

Security design decisions:
  [C1] Enumeration resistance. login() raises the same InvalidCredentials for
       "no such email", "Google-only account" and "wrong password", and runs
       bcrypt in every branch so timing matches. forgot_password() returns the
       same message whether or not the email exists.

  Token pair. Every successful register/login/Google sign-in issues a fresh
       access token AND a fresh refresh token persisted as a new session row.
       A user may hold several sessions at once (one per device).

  Refresh. The session row decides validity: missing -> InvalidRefreshToken;
       expired -> the stale row is deleted and RefreshTokenExpired is raised.
       The refresh token is kept as-is unless Settings.rotate_refresh_tokens
       is on, in which case the same row gets a new token and expiry.

  Reset. Tokens are single-use: a successful reset clears reset_token and
       revokes ALL of the user's sessions, forcing re-login everywhere.

Consistency: users and sessions writes are separate single-row operations.
reset_password() updates the password before revoking sessions, so a crash
between the two leaves old sessions alive but never loses the new password.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError

from auth.mailer import LogMailer
from auth.models import AccessTokenPayload, AuthResult, OAuthProfile, RefreshResult, Session, User
from auth.store import SessionStore, UserStore
from auth.tokens import (
    TokenService,
    burn_password_check,
    dummy_hash,
    generate_refresh_token,
    generate_reset_token,
    hash_password,
    verify_password,
)
from core.config import Settings
from core.db import is_past, store_errors
from core.errors import (
    CreateFailed,
    DeleteFailed,
    EmailExists,
    FetchFailed,
    InvalidCredentials,
    InvalidRefreshToken,
    InvalidResetToken,
    RefreshTokenExpired,
    ResetTokenExpired,
    UpdateFailed,
    UserNotFound,
)

logger = logging.getLogger("inkwell.auth")

FORGOT_PASSWORD_MESSAGE = "If that email exists, we've sent a reset link"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def public_user(user: User) -> User:
    """Return a copy of the user safe to hand to the transport layer.

    Strips the password hash and any pending reset token.
    """
    return User(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        avatar_url=user.avatar_url,
        google_oauth_id=user.google_oauth_id,
        preferences=dict(user.preferences),
        email_verified=user.email_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class AuthService:
    """Composes TokenService, UserStore and SessionStore into the auth flows."""

    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        tokens: TokenService,
        settings: Settings,
        mailer=None,
    ) -> None:
        self.users = users
        self.sessions = sessions
        self.tokens = tokens
        self.settings = settings
        self.mailer = mailer or LogMailer()
        # Build the dummy hash now so the first unknown-email login is not slower.
        dummy_hash(settings.bcrypt_rounds)

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------

    def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create a reader account with a local password and sign it in.

        The get_by_email() pre-check gives the common case a clean error; the
        IntegrityError branch covers two concurrent registrations racing past
        the pre-check.
        """
        email = normalize_email(email)
        with store_errors(FetchFailed):
            if self.users.get_by_email(email) is not None:
                raise EmailExists()

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
            role="reader",
        )
        with store_errors(CreateFailed):
            try:
                user.id = self.users.create_user(user)
            except IntegrityError as exc:
                raise EmailExists() from exc
            created = self.users.get_by_id(user.id)
        if created is None:
            raise CreateFailed("Failed to create user.")
        logger.info("User registered (user_id=%s)", created.id)
        return self._issue_token_pair(created)

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Raises InvalidCredentials for every failure mode [C1].
        """
        with store_errors(FetchFailed):
            user = self.users.get_by_email(normalize_email(email))
        if user is None or not user.password_hash:
            burn_password_check(password, self.settings.bcrypt_rounds)
            logger.info("Login failed: unknown or password-less account")
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.info("Login failed: bad password (user_id=%s)", user.id)
            raise InvalidCredentials()
        return self._issue_token_pair(user)

    def oauth_login(self, profile: OAuthProfile) -> AuthResult:
        """Sign in with a Google profile, linking or creating the account.

        Lookup order: Google subject id, then email. A match by email links the
        Google id to that account so both login paths work afterwards. No match
        creates a new verified reader. This flow never fails on "new user".
        """
        email = normalize_email(profile.email)
        with store_errors(FetchFailed):
            user = self.users.get_by_google_id(profile.google_id)
            if user is None:
                user = self.users.get_by_email(email)
                if user is not None:
                    with store_errors(UpdateFailed):
                        self.users.link_google(user.id, profile.google_id)
                    logger.info("Linked Google identity to existing account (user_id=%s)", user.id)
                    user = self.users.get_by_id(user.id)

        if user is None:
            new_user = User(
                name=profile.name or email,
                email=email,
                google_oauth_id=profile.google_id,
                avatar_url=profile.avatar,
                email_verified=True,
                role="reader",
            )
            with store_errors(CreateFailed):
                user_id = self.users.create_user(new_user)
                user = self.users.get_by_id(user_id)
            logger.info("Created account from Google sign-in (user_id=%s)", user_id)

        if user is None:
            raise CreateFailed("Authentication failed.")
        return self._issue_token_pair(user)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def refresh(self, refresh_token: str) -> RefreshResult:
        """Exchange a refresh token for a new access token."""
        with store_errors(FetchFailed):
            session = self.sessions.get_by_token(refresh_token)
        if session is None:
            raise InvalidRefreshToken()

        if is_past(session.expires_at):
            with store_errors(DeleteFailed):
                self.sessions.delete_by_token(refresh_token)
            logger.info("Expired session removed on refresh (user_id=%s)", session.user_id)
            raise RefreshTokenExpired()

        with store_errors(FetchFailed):
            user = self.users.get_by_id(session.user_id)
        if user is None:
            raise UserNotFound()

        access_token = self.tokens.generate_access_token(_payload_for(user))
        if not self.settings.rotate_refresh_tokens:
            return RefreshResult(access_token=access_token)

        new_token = generate_refresh_token()
        with store_errors(UpdateFailed):
            self.sessions.rotate(session.id, new_token, self.tokens.refresh_token_expiry().isoformat())
        return RefreshResult(access_token=access_token, refresh_token=new_token)

    def logout(self, refresh_token: str) -> dict:
        """Revoke one session. Unknown tokens are not an error."""
        with store_errors(DeleteFailed):
            self.sessions.delete_by_token(refresh_token)
        return {"message": "Logged out successfully"}

    def authenticate(self, access_token: str) -> User | None:
        """Resolve a bearer access token to its current User record.

        Raises InvalidToken if verification fails. Returns None if the token is
        valid but the user has since been deleted.
        """
        payload = self.tokens.verify_access_token(access_token)
        with store_errors(FetchFailed):
            return self.users.get_by_id(payload.user_id)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def forgot_password(self, email: str) -> dict:
        """Stamp a fresh 1-hour reset token if the account exists.

        The response is identical either way [C1]. A newer request overwrites
        the previous token, so only the latest link works.
        """
        with store_errors(FetchFailed):
            user = self.users.get_by_email(normalize_email(email))
        if user is not None:
            token = generate_reset_token()
            expires = datetime.now(timezone.utc) + timedelta(seconds=self.settings.reset_token_expire_seconds)
            with store_errors(UpdateFailed):
                self.users.set_reset_token(user.id, token, expires)
            self.mailer.send_password_reset(user.email, self.reset_link(token))
            logger.info("Password reset token issued (user_id=%s)", user.id)
        return {"message": FORGOT_PASSWORD_MESSAGE}

    def reset_password(self, token: str, new_password: str) -> dict:
        """Consume a reset token: set the new password and revoke all sessions."""
        with store_errors(FetchFailed):
            user = self.users.get_by_reset_token(token)
        if user is None:
            raise InvalidResetToken()
        if is_past(user.reset_token_expires):
            raise ResetTokenExpired()

        with store_errors(UpdateFailed):
            self.users.update_user(
                user.id,
                password_hash=hash_password(new_password, self.settings.bcrypt_rounds),
                reset_token=None,
                reset_token_expires=None,
            )
            revoked = self.sessions.delete_for_user(user.id)
        logger.info("Password reset completed (user_id=%s, sessions_revoked=%d)", user.id, revoked)
        return {"message": "Password reset successfully"}

    def reset_link(self, token: str) -> str:
        return f"{self.settings.frontend_url.rstrip('/')}/reset-password?token={token}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _issue_token_pair(self, user: User) -> AuthResult:
        access_token = self.tokens.generate_access_token(_payload_for(user))
        refresh_token = generate_refresh_token()
        session = Session(
            user_id=user.id,
            refresh_token=refresh_token,
            expires_at=self.tokens.refresh_token_expiry().isoformat(),
        )
        with store_errors(CreateFailed):
            self.sessions.create(session)
        return AuthResult(user=public_user(user), access_token=access_token, refresh_token=refresh_token)


def _payload_for(user: User) -> AccessTokenPayload:
    return AccessTokenPayload(user_id=user.id, email=user.email, role=user.role)
