"""
tests/test_auth_service.py -- Unit tests for AuthService and AccountService.

Covers:
  - register: email uniqueness (case-insensitive), reader role, no hash leak
  - login: identical InvalidCredentials for unknown email / wrong password /
    Google-only account [C1]
  - refresh: without rotation the token is reusable; with rotation the old
    one stops working; expired sessions are deleted
  - logout: revokes one session only
  - forgot/reset password: same message for known and unknown emails [C1],
    single-use tokens, expiry, every session revoked on success
  - Google sign-in: link by email, create new verified reader, reuse by id
  - AccountService: profile merge, change_password, delete, role update, invite
  - extract_google_profile: verified email required

Fixtures used (from conftest.py): auth_service, auth_stores, settings, mailer.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from auth.accounts import AccountService
from auth.models import OAuthProfile, Session, User
from auth.oauth import extract_google_profile
from auth.service import FORGOT_PASSWORD_MESSAGE, AuthService
from auth.tokens import TokenService
from core.errors import (
    EmailExists,
    InvalidCredentials,
    InvalidPassword,
    InvalidRefreshToken,
    InvalidResetToken,
    InvalidRole,
    RefreshTokenExpired,
    ResetTokenExpired,
    UserNotFound,
)

PASSWORD = "Str0ng!Pass"


def _reset_token_from(link: str) -> str:
    return link.split("token=", 1)[1]


# ---------------------------------------------------------------------------
# Registration and login
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_issues_token_pair(self, auth_service: AuthService) -> None:
        result = auth_service.register("Ana", "ana@example.com", PASSWORD)
        assert result.user.role == "reader"
        assert result.user.password_hash is None, "password hash must never leave the service"
        payload = auth_service.tokens.verify_access_token(result.access_token)
        assert payload.user_id == result.user.id
        assert auth_service.sessions.get_by_token(result.refresh_token) is not None

    def test_email_is_normalized(self, auth_service: AuthService) -> None:
        result = auth_service.register("Ana", "  Ana@Example.COM ", PASSWORD)
        assert result.user.email == "ana@example.com"

    def test_duplicate_email_rejected_case_insensitively(self, auth_service: AuthService) -> None:
        auth_service.register("Ana", "ana@example.com", PASSWORD)
        with pytest.raises(EmailExists):
            auth_service.register("Ana Two", "ANA@example.com", PASSWORD)


class TestLogin:
    def test_valid_login_creates_new_session(self, auth_service: AuthService) -> None:
        first = auth_service.register("Ana", "ana@example.com", PASSWORD)
        second = auth_service.login("ana@example.com", PASSWORD)
        assert second.refresh_token != first.refresh_token
        assert len(auth_service.sessions.list_for_user(first.user.id)) == 2

    def test_failure_modes_are_indistinguishable(self, auth_service: AuthService, auth_stores) -> None:
        users, _ = auth_stores
        auth_service.register("Ana", "ana@example.com", PASSWORD)
        users.create_user(User(name="G", email="google@example.com", google_oauth_id="g-1"))

        errors = []
        for email, password in (
            ("nobody@example.com", PASSWORD),
            ("ana@example.com", "Wrong!Pass1"),
            ("google@example.com", PASSWORD),
        ):
            with pytest.raises(InvalidCredentials) as info:
                auth_service.login(email, password)
            errors.append((info.value.code, info.value.message, info.value.status_code))
        assert len(set(errors)) == 1

    def test_unknown_email_burns_configured_cost(self, auth_service: AuthService) -> None:
        with patch("auth.service.burn_password_check") as burn:
            with pytest.raises(InvalidCredentials):
                auth_service.login("nobody@example.com", PASSWORD)
        burn.assert_called_once_with(PASSWORD, auth_service.settings.bcrypt_rounds)


# ---------------------------------------------------------------------------
# Refresh and logout
# ---------------------------------------------------------------------------


class TestRefresh:
    def test_refresh_without_rotation_keeps_token(self, auth_service: AuthService) -> None:
        result = auth_service.register("Ana", "ana@example.com", PASSWORD)
        first = auth_service.refresh(result.refresh_token)
        second = auth_service.refresh(result.refresh_token)
        assert first.refresh_token is None
        assert second.access_token
        assert auth_service.tokens.verify_access_token(first.access_token).user_id == result.user.id

    def test_refresh_with_rotation_replaces_token(self, auth_stores, settings, mailer) -> None:
        users, sessions = auth_stores
        rotating = settings.model_copy(update={"rotate_refresh_tokens": True})
        service = AuthService(users, sessions, TokenService.from_settings(rotating), rotating, mailer=mailer)
        result = service.register("Ana", "ana@example.com", PASSWORD)

        rotated = service.refresh(result.refresh_token)
        assert rotated.refresh_token and rotated.refresh_token != result.refresh_token
        with pytest.raises(InvalidRefreshToken):
            service.refresh(result.refresh_token)
        assert service.refresh(rotated.refresh_token).access_token

    def test_unknown_token_rejected(self, auth_service: AuthService) -> None:
        with pytest.raises(InvalidRefreshToken):
            auth_service.refresh("no-such-token")

    def test_expired_session_is_deleted(self, auth_service: AuthService) -> None:
        result = auth_service.register("Ana", "ana@example.com", PASSWORD)
        past = (datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat()
        auth_service.sessions.create(Session(user_id=result.user.id, refresh_token="stale", expires_at=past))

        with pytest.raises(RefreshTokenExpired):
            auth_service.refresh("stale")
        assert auth_service.sessions.get_by_token("stale") is None

    def test_logout_revokes_only_that_session(self, auth_service: AuthService) -> None:
        first = auth_service.register("Ana", "ana@example.com", PASSWORD)
        second = auth_service.login("ana@example.com", PASSWORD)
        assert auth_service.logout(first.refresh_token) == {"message": "Logged out successfully"}
        with pytest.raises(InvalidRefreshToken):
            auth_service.refresh(first.refresh_token)
        assert auth_service.refresh(second.refresh_token).access_token

    def test_logout_unknown_token_is_not_an_error(self, auth_service: AuthService) -> None:
        assert auth_service.logout("never-issued")["message"] == "Logged out successfully"


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


class TestPasswordReset:
    def test_same_message_for_known_and_unknown_email(self, auth_service: AuthService, mailer) -> None:
        auth_service.register("Ana", "ana@example.com", PASSWORD)
        known = auth_service.forgot_password("ana@example.com")
        unknown = auth_service.forgot_password("nobody@example.com")
        assert known == unknown == {"message": FORGOT_PASSWORD_MESSAGE}
        assert [email for email, _ in mailer.resets] == ["ana@example.com"]

    def test_reset_changes_password_and_revokes_sessions(self, auth_service: AuthService, mailer) -> None:
        result = auth_service.register("Ana", "ana@example.com", PASSWORD)
        auth_service.login("ana@example.com", PASSWORD)
        auth_service.forgot_password("ana@example.com")
        token = _reset_token_from(mailer.resets[-1][1])

        assert auth_service.reset_password(token, "N3w!Password") == {"message": "Password reset successfully"}
        assert auth_service.sessions.list_for_user(result.user.id) == []
        with pytest.raises(InvalidCredentials):
            auth_service.login("ana@example.com", PASSWORD)
        assert auth_service.login("ana@example.com", "N3w!Password").access_token

    def test_reset_token_is_single_use(self, auth_service: AuthService, mailer) -> None:
        auth_service.register("Ana", "ana@example.com", PASSWORD)
        auth_service.forgot_password("ana@example.com")
        token = _reset_token_from(mailer.resets[-1][1])
        auth_service.reset_password(token, "N3w!Password")
        with pytest.raises(InvalidResetToken):
            auth_service.reset_password(token, "Other!Pass9")

    def test_newer_request_invalidates_older_token(self, auth_service: AuthService, mailer) -> None:
        auth_service.register("Ana", "ana@example.com", PASSWORD)
        auth_service.forgot_password("ana@example.com")
        auth_service.forgot_password("ana@example.com")
        old_token = _reset_token_from(mailer.resets[0][1])
        with pytest.raises(InvalidResetToken):
            auth_service.reset_password(old_token, "N3w!Password")

    def test_expired_reset_token(self, auth_service: AuthService, auth_stores) -> None:
        users, _ = auth_stores
        result = auth_service.register("Ana", "ana@example.com", PASSWORD)
        users.set_reset_token(result.user.id, "expired-token", datetime.now(timezone.utc) - timedelta(seconds=1))
        with pytest.raises(ResetTokenExpired):
            auth_service.reset_password("expired-token", "N3w!Password")

    def test_reset_link_points_at_frontend(self, auth_service: AuthService, settings) -> None:
        link = auth_service.reset_link("abc")
        assert link == f"{settings.frontend_url.rstrip('/')}/reset-password?token=abc"


# ---------------------------------------------------------------------------
# Google sign-in
# ---------------------------------------------------------------------------


class TestOAuthLogin:
    def test_creates_verified_reader(self, auth_service: AuthService) -> None:
        profile = OAuthProfile(google_id="g-42", email="New@Example.com", name="New Person", avatar="http://a/p.png")
        result = auth_service.oauth_login(profile)
        assert result.user.email == "new@example.com"
        assert result.user.role == "reader"
        assert result.user.email_verified is True
        assert result.user.google_oauth_id == "g-42"

    def test_links_existing_account_by_email(self, auth_service: AuthService) -> None:
        local = auth_service.register("Ana", "ana@example.com", PASSWORD)
        result = auth_service.oauth_login(OAuthProfile(google_id="g-7", email="ana@example.com", name="Ana"))
        assert result.user.id == local.user.id
        assert result.user.google_oauth_id == "g-7"
        # Both login paths keep working.
        assert auth_service.login("ana@example.com", PASSWORD).user.id == local.user.id

    def test_second_sign_in_reuses_account(self, auth_service: AuthService) -> None:
        profile = OAuthProfile(google_id="g-9", email="nine@example.com", name="Nine")
        first = auth_service.oauth_login(profile)
        second = auth_service.oauth_login(profile)
        assert first.user.id == second.user.id


# ---------------------------------------------------------------------------
# AccountService
# ---------------------------------------------------------------------------


@pytest.fixture
def accounts(auth_stores, settings, mailer) -> AccountService:
    users, sessions = auth_stores
    return AccountService(users, sessions, settings, mailer=mailer)


class TestAccounts:
    def test_preferences_merge_one_level(self, auth_service: AuthService, accounts: AccountService) -> None:
        uid = auth_service.register("Ana", "ana@example.com", PASSWORD).user.id
        accounts.update_profile(uid, preferences={"theme": "dark", "email_notifications": {"comments": True}})
        updated = accounts.update_profile(uid, preferences={"email_notifications": {"newsletter": False}})
        assert updated.preferences == {
            "theme": "dark",
            "email_notifications": {"comments": True, "newsletter": False},
        }

    def test_update_name_only(self, auth_service: AuthService, accounts: AccountService) -> None:
        uid = auth_service.register("Ana", "ana@example.com", PASSWORD).user.id
        assert accounts.update_profile(uid, name="Ana Maria").name == "Ana Maria"

    def test_change_password_requires_current(self, auth_service: AuthService, accounts: AccountService) -> None:
        uid = auth_service.register("Ana", "ana@example.com", PASSWORD).user.id
        with pytest.raises(InvalidPassword):
            accounts.change_password(uid, "Wrong!Pass1", "N3w!Password")

    def test_change_password_revokes_sessions(self, auth_service: AuthService, accounts: AccountService) -> None:
        result = auth_service.register("Ana", "ana@example.com", PASSWORD)
        accounts.change_password(result.user.id, PASSWORD, "N3w!Password")
        with pytest.raises(InvalidRefreshToken):
            auth_service.refresh(result.refresh_token)

    def test_delete_account(self, auth_service: AuthService, accounts: AccountService) -> None:
        uid = auth_service.register("Ana", "ana@example.com", PASSWORD).user.id
        assert accounts.delete_account(uid) == {"message": "Account deleted successfully"}
        with pytest.raises(UserNotFound):
            accounts.get_profile(uid)
        with pytest.raises(UserNotFound):
            accounts.delete_account(uid)

    def test_update_role(self, auth_service: AuthService, accounts: AccountService) -> None:
        uid = auth_service.register("Ana", "ana@example.com", PASSWORD).user.id
        assert accounts.update_role(uid, "author").role == "author"
        with pytest.raises(UserNotFound):
            accounts.update_role(99999, "author")

    def test_unknown_role_rejected(self, auth_service: AuthService, accounts: AccountService) -> None:
        uid = auth_service.register("Ana", "ana@example.com", PASSWORD).user.id
        with pytest.raises(InvalidRole):
            accounts.update_role(uid, "editor")
        with pytest.raises(InvalidRole):
            accounts.invite_user("Ed", "ed@example.com", "owner", send_invitation=False)
        assert accounts.get_profile(uid).role == "reader"

    def test_invite_sends_reset_link(self, auth_service: AuthService, accounts: AccountService, mailer) -> None:
        user, link = accounts.invite_user("Ed", "Ed@Example.com", "author")
        assert user.email == "ed@example.com"
        assert user.role == "author"
        assert mailer.invitations == [("ed@example.com", link)]
        # The invitation link works as a password reset.
        auth_service.reset_password(_reset_token_from(link), "Ed!Passw0rd")
        assert auth_service.login("ed@example.com", "Ed!Passw0rd").user.id == user.id

    def test_invite_existing_email_rejected(self, auth_service: AuthService, accounts: AccountService) -> None:
        auth_service.register("Ana", "ana@example.com", PASSWORD)
        with pytest.raises(EmailExists):
            accounts.invite_user("Ana", "ana@example.com", "reader", send_invitation=False)

    def test_list_users_filters_by_role(self, auth_service: AuthService, accounts: AccountService) -> None:
        auth_service.register("Ana", "ana@example.com", PASSWORD)
        accounts.invite_user("Ed", "ed@example.com", "author", send_invitation=False)
        authors, total = accounts.list_users(role="author")
        assert total == 1
        assert [u.email for u in authors] == ["ed@example.com"]
        assert accounts.count_users() == 2


class TestGoogleProfile:
    """extract_google_profile() accepts only verified emails [H1]."""

    def test_verified_profile(self) -> None:
        token = {
            "userinfo": {
                "sub": "1234",
                "email": "ana@example.com",
                "email_verified": True,
                "name": "Ana",
                "picture": "https://example.com/ana.png",
            }
        }
        profile = extract_google_profile(token)
        assert profile == OAuthProfile(
            google_id="1234", email="ana@example.com", name="Ana", avatar="https://example.com/ana.png"
        )

    def test_name_falls_back_to_local_part(self) -> None:
        token = {"userinfo": {"sub": "1", "email": "bo@example.com", "email_verified": True}}
        assert extract_google_profile(token).name == "bo"

    @pytest.mark.parametrize(
        "token",
        [
            {},
            {"userinfo": {"sub": "1", "email": "x@example.com", "email_verified": False}},
            {"userinfo": {"sub": "1", "email": "x@example.com"}},
            {"userinfo": {"email": "x@example.com", "email_verified": True}},
        ],
    )
    def test_rejected(self, token: dict) -> None:
        with pytest.raises(ValueError):
            extract_google_profile(token)
