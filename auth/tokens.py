"""
auth/tokens.py -- Password hashing, opaque token generation, and JWT access tokens.

Security design decisions:
  Passwords: bcrypt directly (no passlib wrapper). Bcrypt is the right choice
       for low-entropy secrets because its cost factor makes brute-force
       expensive. The work factor comes from Settings.bcrypt_rounds (default
       10). verify_password() never raises -- a malformed or missing hash is
       simply "no match".

  Opaque tokens: secrets.token_urlsafe() -- CSPRNG output, URL-safe.
       Reset tokens carry 32 random bytes (43 chars), refresh tokens 48
       random bytes (64 chars). They are bearer secrets: whoever holds one
       can use it, so they are never logged.

  Access tokens: python-jose HS256 JWTs carrying user_id, email, role, iat,
       exp. TokenService.verify_access_token() raises InvalidToken on ANY
       failure (bad signature, malformed, expired, missing claims) -- callers
       cannot tell which, so there is no oracle to probe.

  Refresh tokens are NOT JWTs. Their validity is the presence of an
       unexpired sessions row, which makes them individually revocable.

Layer rule: no imports from api/ or content/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
from jose import JWTError, jwt

from auth.models import AccessTokenPayload
from core.config import Settings
from core.errors import InvalidToken

logger = logging.getLogger("inkwell.auth")

_ALGORITHM = "HS256"
_DEFAULT_ROUNDS = 10

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = _DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Passwords longer than 72 bytes are truncated by bcrypt. The API layer caps
    password length at 128 characters, which keeps typical inputs inside the
    limit.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Returns False instead of raising for a None or malformed hash.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Timing equalization dummy hash [C1].
# Verified whenever a login targets an unknown or Google-only account, so the
# response time does not reveal whether the email is registered. The dummy
# must carry the same cost factor as real hashes; it is built once per rounds
# value so only the first such login pays for the hashing.


@lru_cache
def dummy_hash(rounds: int = _DEFAULT_ROUNDS) -> str:
    return hash_password("inkwell_timing_dummy", rounds=rounds)


def burn_password_check(plain: str, rounds: int = _DEFAULT_ROUNDS) -> None:
    """Run one bcrypt comparison against the dummy hash and discard the result."""
    verify_password(plain, dummy_hash(rounds))


# ---------------------------------------------------------------------------
# Opaque bearer tokens
# ---------------------------------------------------------------------------


def generate_reset_token() -> str:
    """Single-use password reset secret (43 URL-safe chars, 256 bits)."""
    return secrets.token_urlsafe(32)


def generate_refresh_token() -> str:
    """Refresh token secret (64 URL-safe chars, 384 bits)."""
    return secrets.token_urlsafe(48)


# ---------------------------------------------------------------------------
# Access tokens
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and verifies signed access tokens; computes refresh expiry.

    Usage:
        tokens = TokenService.from_settings(get_settings())
        jwt_str = tokens.generate_access_token(AccessTokenPayload(1, "a@b.c", "reader"))
        payload = tokens.verify_access_token(jwt_str)
    """

    def __init__(
        self,
        secret_key: str,
        access_expire_seconds: int = 900,
        refresh_expire_days: int = 7,
        algorithm: str = _ALGORITHM,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.access_expire_seconds = access_expire_seconds
        self.refresh_expire_days = refresh_expire_days

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.secret_key,
            access_expire_seconds=settings.access_token_expire_seconds,
            refresh_expire_days=settings.refresh_token_expire_days,
        )

    def generate_access_token(self, payload: AccessTokenPayload) -> str:
        """Encode a signed JWT with identity claims plus iat/exp."""
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(payload.user_id),
            "user_id": payload.user_id,
            "email": payload.email,
            "role": payload.role,
            "iat": now,
            "exp": now + timedelta(seconds=self.access_expire_seconds),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify_access_token(self, token: str) -> AccessTokenPayload:
        """Decode and verify a JWT. Raises InvalidToken on any failure."""
        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidToken() from exc
        try:
            return AccessTokenPayload(
                user_id=int(claims["user_id"]),
                email=claims["email"],
                role=claims["role"],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken() from exc

    def refresh_token_expiry(self, now: datetime | None = None) -> datetime:
        now = now or datetime.now(timezone.utc)
        return now + timedelta(days=self.refresh_expire_days)
