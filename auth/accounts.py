"""
auth/accounts.py -- Profile self-service and admin user management.

AccountService covers everything about a user record that is not a login
flow: reading and editing the profile, changing or dropping the account,
and the admin operations (list, role change, invitation).

Invitations: an admin-created account gets a random throwaway password the
user never learns, plus a 24-hour reset token. The returned reset link is
how the invitee sets a real password -- it goes through the same
AuthService.reset_password() path as a forgotten password.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError

from auth.mailer import LogMailer
from auth.models import ROLES, User
from auth.service import normalize_email, public_user
from auth.store import SessionStore, UserStore
from auth.tokens import generate_reset_token, hash_password, verify_password
from core.config import Settings
from core.db import store_errors
from core.errors import (
    CreateFailed,
    DeleteFailed,
    EmailExists,
    FetchFailed,
    InvalidPassword,
    InvalidRole,
    UpdateFailed,
    UserNotFound,
)

logger = logging.getLogger("inkwell.auth.accounts")


class AccountService:
    def __init__(self, users: UserStore, sessions: SessionStore, settings: Settings, mailer=None) -> None:
        self.users = users
        self.sessions = sessions
        self.settings = settings
        self.mailer = mailer or LogMailer()

    # ------------------------------------------------------------------
    # Self-service
    # ------------------------------------------------------------------

    def get_profile(self, user_id: int) -> User:
        with store_errors(FetchFailed):
            user = self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFound()
        return public_user(user)

    def update_profile(
        self,
        user_id: int,
        name: str | None = None,
        avatar_url: str | None = None,
        preferences: dict | None = None,
    ) -> User:
        """Apply a partial profile update.

        preferences is merged one level deep into the stored object, so a
        client can toggle a single setting without resending the rest.
        """
        current = self.get_profile(user_id)
        updates: dict = {}
        if name is not None:
            updates["name"] = name
        if avatar_url is not None:
            updates["avatar_url"] = avatar_url
        if preferences is not None:
            merged = dict(current.preferences)
            for key, value in preferences.items():
                if isinstance(value, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **value}
                else:
                    merged[key] = value
            updates["preferences"] = merged
        if updates:
            with store_errors(UpdateFailed):
                self.users.update_user(user_id, **updates)
        return self.get_profile(user_id)

    def change_password(self, user_id: int, current_password: str, new_password: str) -> dict:
        """Replace a local password after re-verifying the current one.

        Every session is revoked afterwards, including the caller's.
        """
        with store_errors(FetchFailed):
            user = self.users.get_by_id(user_id)
        if user is None or not user.password_hash:
            raise UserNotFound()
        if not verify_password(current_password, user.password_hash):
            raise InvalidPassword()

        with store_errors(UpdateFailed):
            self.users.update_user(user_id, password_hash=hash_password(new_password, self.settings.bcrypt_rounds))
            self.sessions.delete_for_user(user_id)
        logger.info("Password changed, sessions revoked (user_id=%s)", user_id)
        return {"message": "Password updated successfully"}

    def delete_account(self, user_id: int) -> dict:
        with store_errors(DeleteFailed):
            self.sessions.delete_for_user(user_id)
            deleted = self.users.delete_user(user_id)
        if not deleted:
            raise UserNotFound()
        logger.info("Account deleted (user_id=%s)", user_id)
        return {"message": "Account deleted successfully"}

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def list_users(
        self,
        search: str | None = None,
        role: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        with store_errors(FetchFailed):
            users, total = self.users.list_users(search=search, role=role, limit=limit, offset=offset)
        return [public_user(u) for u in users], total

    def count_users(self) -> int:
        with store_errors(FetchFailed):
            return self.users.count_users()

    def update_role(self, user_id: int, role: str) -> User:
        if role not in ROLES:
            raise InvalidRole(detail=f"role must be one of {', '.join(ROLES)}")
        with store_errors(UpdateFailed):
            updated = self.users.update_user(user_id, role=role)
        if not updated:
            raise UserNotFound()
        logger.info("Role changed (user_id=%s, role=%s)", user_id, role)
        return self.get_profile(user_id)

    def invite_user(self, name: str, email: str, role: str, send_invitation: bool = True) -> tuple[User, str]:
        """Create an account on someone's behalf. Returns (user, reset_link)."""
        if role not in ROLES:
            raise InvalidRole(detail=f"role must be one of {', '.join(ROLES)}")
        email = normalize_email(email)
        with store_errors(FetchFailed):
            if self.users.get_by_email(email) is not None:
                raise EmailExists()

        token = generate_reset_token()
        expires = datetime.now(timezone.utc) + timedelta(seconds=self.settings.invite_token_expire_seconds)
        user = User(
            name=name,
            email=email,
            role=role,
            password_hash=hash_password(secrets.token_urlsafe(12), self.settings.bcrypt_rounds),
            reset_token=token,
            reset_token_expires=expires.isoformat(),
        )
        with store_errors(CreateFailed):
            try:
                user_id = self.users.create_user(user)
            except IntegrityError as exc:
                raise EmailExists() from exc
        link = f"{self.settings.frontend_url.rstrip('/')}/reset-password?token={token}"
        if send_invitation:
            self.mailer.send_invitation(email, link)
        logger.info("User invited (user_id=%s, role=%s)", user_id, role)
        return self.get_profile(user_id), link
