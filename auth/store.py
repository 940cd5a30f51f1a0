"""
auth/store.py -- SQLAlchemy Core persistence layer for users and sessions.

Pattern: Repository + Data Mapper (same as content/store.py).
UserStore and SessionStore are the repositories; _row_to_user /
_row_to_session are the mappers. Services never touch SQL directly.

Two repositories, one schema: both stores define their tables on the shared
module-level MetaData, so pointing them at the same URL gives one database
with users and sessions side by side. They are separate classes so the auth
orchestrator can be handed (or tested with) either one independently.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Refresh and reset tokens are stored verbatim. They are high-entropy random
  strings looked up by equality; never log rows from these tables.

Error contract:
  create_user() / create() propagate sqlalchemy.exc.IntegrityError on a
  unique violation so callers can tell "duplicate" apart from other failures.
  Every other SQLAlchemyError propagates unchanged; the service layer wraps
  it into the generic *Failed error kinds.

Layer rule: no imports from api/ or content/.
"""

from __future__ import annotations

import json
from datetime import datetime

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text, func, or_, select
from sqlalchemy.engine import Engine

from auth.models import Session, User
from core.db import make_engine, now_iso

_DEFAULT_DB_URL = "sqlite:///inkwell.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text),  # NULL for Google-only users
    Column("avatar_url", Text),
    Column("role", String(20), nullable=False, server_default="reader"),
    Column("google_oauth_id", String(255), unique=True),  # NULLs are distinct
    Column("preferences", Text),  # JSON object serialized as text
    Column("email_verified", Boolean, nullable=False, server_default="0"),
    Column("reset_token", String(128)),
    Column("reset_token_expires", String(32)),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_sessions = Table(
    "sessions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("refresh_token", String(128), nullable=False, unique=True),
    Column("expires_at", String(32), nullable=False),
    Column("created_at", String(32), nullable=False),
)

# Columns a caller may change through update_user(). Everything else (id,
# email, created_at) is immutable after insert.
_USER_MUTABLE_FIELDS = frozenset(
    {
        "name",
        "password_hash",
        "avatar_url",
        "role",
        "preferences",
        "email_verified",
        "google_oauth_id",
        "reset_token",
        "reset_token_expires",
    }
)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///inkwell.db")
        user_id = store.create_user(User(name="Ada", email="ada@example.com"))
        user = store.get_by_email("ada@example.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL, engine: Engine | None = None) -> None:
        self.engine: Engine = engine or make_engine(db_url)
        metadata.create_all(self.engine)

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        now = now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(
                _users.insert().values(
                    name=user.name,
                    email=user.email,
                    password_hash=user.password_hash,
                    avatar_url=user.avatar_url,
                    role=user.role,
                    google_oauth_id=user.google_oauth_id,
                    preferences=json.dumps(user.preferences or {}),
                    email_verified=user.email_verified,
                    reset_token=user.reset_token,
                    reset_token_expires=user.reset_token_expires,
                    created_at=now,
                    updated_at=now,
                )
            )
            return result.inserted_primary_key[0]

    def get_by_id(self, user_id: int) -> User | None:
        return self._one(_users.c.id == user_id)

    def get_by_email(self, email: str) -> User | None:
        """Exact email lookup. Services lowercase emails before storing them."""
        return self._one(_users.c.email == email)

    def get_by_google_id(self, google_id: str) -> User | None:
        return self._one(_users.c.google_oauth_id == google_id)

    def get_by_reset_token(self, token: str) -> User | None:
        return self._one(_users.c.reset_token == token)

    def link_google(self, user_id: int, google_id: str) -> None:
        """Attach a Google identity to an existing account (first Google sign-in
        for an email that registered with a password)."""
        self.update_user(user_id, google_oauth_id=google_id)

    def update_user(self, user_id: int, **fields) -> bool:
        """Update mutable fields on an existing user.

        Unknown field names raise ValueError rather than being ignored.

        Returns True if a row was updated, False if user_id was not found.
        """
        values: dict = {}
        for key, value in fields.items():
            if key not in _USER_MUTABLE_FIELDS:
                raise ValueError(f"Unknown or immutable user field: {key!r}")
            values[key] = json.dumps(value) if key == "preferences" else value
        if not values:
            return False
        values["updated_at"] = now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(**values))
        return result.rowcount > 0

    def set_reset_token(self, user_id: int, token: str | None, expires_at: datetime | None) -> None:
        """Stamp (or clear, with None) the single active reset token.

        Overwrites any earlier token, so only the newest reset link works.
        """
        self.update_user(
            user_id,
            reset_token=token,
            reset_token_expires=expires_at.isoformat() if expires_at else None,
        )

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user record. Returns True if deleted.

        Sessions live in SessionStore; the caller revokes them first.
        """
        with self.engine.begin() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
        return result.rowcount > 0

    def list_users(
        self,
        search: str | None = None,
        role: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        """Return one page of users plus the total matching count.

        search matches name or email case-insensitively (substring).
        """
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(func.lower(_users.c.name).like(pattern), func.lower(_users.c.email).like(pattern)))
        if role:
            conditions.append(_users.c.role == role)

        query = select(_users).where(*conditions).order_by(_users.c.created_at.desc(), _users.c.id.desc())
        count_query = select(func.count()).select_from(_users).where(*conditions)
        with self.engine.connect() as conn:
            rows = conn.execute(query.limit(limit).offset(offset)).fetchall()
            total = conn.execute(count_query).scalar() or 0
        return [_row_to_user(r) for r in rows], total

    def count_users(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_users)).scalar() or 0

    def _one(self, condition) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(condition)).fetchone()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class SessionStore:
    """Repository for refresh-token sessions.

    Every method is a single-statement, row-level operation. delete_* are
    idempotent: deleting a token that does not exist is not an error.
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL, engine: Engine | None = None) -> None:
        self.engine: Engine = engine or make_engine(db_url)
        metadata.create_all(self.engine)

    def create(self, session: Session) -> int:
        """Persist a new session. Raises IntegrityError on a token collision."""
        with self.engine.begin() as conn:
            result = conn.execute(
                _sessions.insert().values(
                    user_id=session.user_id,
                    refresh_token=session.refresh_token,
                    expires_at=session.expires_at,
                    created_at=now_iso(),
                )
            )
            return result.inserted_primary_key[0]

    def get_by_token(self, refresh_token: str) -> Session | None:
        with self.engine.connect() as conn:
            row = conn.execute(_sessions.select().where(_sessions.c.refresh_token == refresh_token)).fetchone()
        return _row_to_session(row) if row is not None else None

    def list_for_user(self, user_id: int) -> list[Session]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                _sessions.select().where(_sessions.c.user_id == user_id).order_by(_sessions.c.created_at)
            ).fetchall()
        return [_row_to_session(r) for r in rows]

    def rotate(self, session_id: int, refresh_token: str, expires_at: str) -> bool:
        """Replace a session's token in place (refresh-token rotation)."""
        with self.engine.begin() as conn:
            result = conn.execute(
                _sessions.update()
                .where(_sessions.c.id == session_id)
                .values(refresh_token=refresh_token, expires_at=expires_at)
            )
        return result.rowcount > 0

    def delete_by_token(self, refresh_token: str) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.refresh_token == refresh_token))
        return result.rowcount

    def delete_for_user(self, user_id: int) -> int:
        """Revoke every session a user holds. Returns the number removed."""
        with self.engine.begin() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.user_id == user_id))
        return result.rowcount

    def purge_expired(self) -> int:
        """Delete sessions whose expiry has passed. Returns rows removed.

        ISO 8601 UTC strings of equal format sort lexicographically in time
        order, so a string comparison is a correct time comparison here.
        """
        with self.engine.begin() as conn:
            result = conn.execute(_sessions.delete().where(_sessions.c.expires_at < now_iso()))
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    try:
        preferences = json.loads(row.preferences) if row.preferences else {}
    except json.JSONDecodeError:
        preferences = {}
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password_hash=row.password_hash,
        avatar_url=row.avatar_url,
        role=row.role,
        google_oauth_id=row.google_oauth_id,
        preferences=preferences,
        email_verified=bool(row.email_verified),
        reset_token=row.reset_token,
        reset_token_expires=row.reset_token_expires,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_session(row) -> Session:
    return Session(
        id=row.id,
        user_id=row.user_id,
        refresh_token=row.refresh_token,
        expires_at=row.expires_at,
        created_at=row.created_at,
    )
