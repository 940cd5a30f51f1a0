"""
tests/test_tokens.py -- Unit tests for auth/tokens.py.

Covers:
  - bcrypt hash / verify, including None and malformed hashes
  - opaque token lengths and uniqueness
  - access token round trip, tamper, wrong key and expiry -> InvalidToken
  - refresh expiry arithmetic
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.models import AccessTokenPayload
from auth.tokens import (
    TokenService,
    dummy_hash,
    generate_refresh_token,
    generate_reset_token,
    hash_password,
    verify_password,
)
from core.errors import InvalidToken

SECRET = "s" * 64


class TestPasswordHashing:
    def test_hash_verifies(self) -> None:
        hashed = hash_password("Correct!Horse1", rounds=4)
        assert hashed != "Correct!Horse1"
        assert verify_password("Correct!Horse1", hashed)

    def test_wrong_password_fails(self) -> None:
        hashed = hash_password("Correct!Horse1", rounds=4)
        assert not verify_password("wrong", hashed)

    def test_missing_hash_is_no_match(self) -> None:
        assert verify_password("anything", None) is False
        assert verify_password("anything", "") is False

    def test_malformed_hash_is_no_match(self) -> None:
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_salts_differ(self) -> None:
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    @pytest.mark.parametrize("rounds", [4, 5])
    def test_dummy_hash_matches_configured_cost(self, rounds: int) -> None:
        real = hash_password("Correct!Horse1", rounds=rounds)
        assert dummy_hash(rounds)[:7] == real[:7] == f"$2b${rounds:02d}$"


class TestOpaqueTokens:
    def test_reset_token_shape(self) -> None:
        token = generate_reset_token()
        assert len(token) == 43
        assert token != generate_reset_token()

    def test_refresh_token_shape(self) -> None:
        token = generate_refresh_token()
        assert len(token) == 64
        assert token != generate_refresh_token()


class TestAccessTokens:
    def test_round_trip(self) -> None:
        tokens = TokenService(SECRET)
        payload = AccessTokenPayload(user_id=7, email="ana@example.com", role="author")
        assert tokens.verify_access_token(tokens.generate_access_token(payload)) == payload

    def test_claims_carry_expiry(self) -> None:
        tokens = TokenService(SECRET, access_expire_seconds=900)
        token = tokens.generate_access_token(AccessTokenPayload(1, "a@b.co", "reader"))
        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] - claims["iat"] == 900
        assert claims["sub"] == "1"

    def test_expired_token_rejected(self) -> None:
        tokens = TokenService(SECRET, access_expire_seconds=-10)
        token = tokens.generate_access_token(AccessTokenPayload(1, "a@b.co", "reader"))
        with pytest.raises(InvalidToken):
            tokens.verify_access_token(token)

    def test_wrong_key_rejected(self) -> None:
        token = TokenService(SECRET).generate_access_token(AccessTokenPayload(1, "a@b.co", "reader"))
        with pytest.raises(InvalidToken):
            TokenService("k" * 64).verify_access_token(token)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidToken):
            TokenService(SECRET).verify_access_token("not.a.jwt")

    def test_missing_claims_rejected(self) -> None:
        token = jwt.encode({"sub": "1"}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            TokenService(SECRET).verify_access_token(token)


def test_refresh_token_expiry_adds_days() -> None:
    tokens = TokenService(SECRET, refresh_expire_days=7)
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert tokens.refresh_token_expiry(now) == now + timedelta(days=7)
