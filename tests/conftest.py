"""
tests/conftest.py -- Shared test fixtures for Inkwell unit and integration tests.

This module provides:
  - memory_url(): named shared-memory SQLite URL, unique per call
  - settings / content_store / auth_stores: fresh, isolated building blocks
  - auth_service: AuthService wired to in-memory stores and a recording mailer
  - api_client: TestClient over the real app with a patched lifespan,
    plus an admin access token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

Environment variables must be set before any project import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError, and so
the rate limits do not trip during a full test run.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

# CRITICAL: Set env before any api/auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("AUTH_RATE_LIMIT", "1000/minute")
os.environ.setdefault("API_RATE_LIMIT", "10000/minute")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app, init_state
from auth.models import AccessTokenPayload, User
from auth.service import AuthService
from auth.store import SessionStore, UserStore
from auth.tokens import TokenService, hash_password
from content.store import ContentStore
from core.config import Settings

ADMIN_EMAIL = "admin@inkwell.test"
ADMIN_PASSWORD = "Admin!Pass1"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def memory_url(prefix: str) -> str:
    """Return a fresh named shared-memory SQLite URL.

    The uuid suffix keeps every fixture instance on its own database, so no
    test sees rows written by another.
    """
    return f"sqlite:///file:{prefix}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


class RecordingMailer:
    """Mailer double that keeps every message instead of logging it."""

    def __init__(self) -> None:
        self.resets: list[tuple[str, str]] = []
        self.invitations: list[tuple[str, str]] = []

    def send_password_reset(self, email: str, link: str) -> None:
        self.resets.append((email, link))

    def send_invitation(self, email: str, link: str) -> None:
        self.invitations.append((email, link))


@pytest.fixture
def settings() -> Settings:
    return Settings(debug=True, bcrypt_rounds=4)


@pytest.fixture
def content_store() -> Generator[ContentStore, None, None]:
    store = ContentStore(db_url=memory_url("test_content"))
    yield store
    store.close()


@pytest.fixture
def auth_stores() -> Generator[tuple[UserStore, SessionStore], None, None]:
    url = memory_url("test_auth")
    users = UserStore(db_url=url)
    sessions = SessionStore(db_url=url)
    yield users, sessions
    sessions.close()
    users.close()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def auth_service(auth_stores, settings, mailer) -> AuthService:
    users, sessions = auth_stores
    return AuthService(users, sessions, TokenService.from_settings(settings), settings, mailer=mailer)


# ---------------------------------------------------------------------------
# Integration client
# ---------------------------------------------------------------------------


def _patch_lifespan(users: UserStore, sessions: SessionStore, content: ContentStore, cfg: Settings):
    """Return an async context manager that replaces the real lifespan.

    Wires the test stores through the same init_state() the real lifespan
    uses, and mocks the OAuth registry to prevent real network calls.

    The purge_task is a long-sleeping coroutine that keeps asyncio happy
    (a real asyncio.Task is required; MagicMock would fail on .cancel()).
    """

    @asynccontextmanager
    async def test_lifespan(app):
        init_state(app, users, sessions, content, cfg)
        app.state.oauth = MagicMock()
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, admin_token, admin_id) for API integration tests.

    One client per test module: the stores live for the whole module, so
    tests inside a module must not assume an empty database.
    """
    from core.config import get_settings

    cfg = get_settings()
    auth_url = memory_url("test_api_auth")
    users = UserStore(db_url=auth_url)
    sessions = SessionStore(db_url=auth_url)
    content = ContentStore(db_url=memory_url("test_api_content"))

    admin = User(
        name="Test Admin",
        email=ADMIN_EMAIL,
        role="admin",
        password_hash=hash_password(ADMIN_PASSWORD, rounds=4),
    )
    uid = users.create_user(admin)
    token = TokenService.from_settings(cfg).generate_access_token(
        AccessTokenPayload(user_id=uid, email=ADMIN_EMAIL, role="admin")
    )

    app.router.lifespan_context = _patch_lifespan(users, sessions, content, cfg)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    content.close()
    sessions.close()
    users.close()
