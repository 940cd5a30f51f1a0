"""
core/db.py -- Engine construction and timestamp helpers shared by every store.

Stores (auth/store.py, content/store.py) each own their tables and SQL; this
module only knows how to open an engine for a URL. SQLAlchemy provides the
database-agnostic abstraction: swapping SQLite for PostgreSQL is a connection
string change, not a rewrite.

Layer rule: core/ is the kernel. No imports from api/, auth/, or content/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.errors import AppError

logger = logging.getLogger("inkwell.db")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode on every new SQLite connection.

    SQLite PRAGMAs are per-connection and are not inherited from the pool, so
    this runs on each connect event.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_iso(value: str) -> datetime:
    """Parse an ISO 8601 timestamp, treating naive values as UTC."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def is_past(value: str | None) -> bool:
    """True when the ISO timestamp is missing, malformed, or already elapsed."""
    if not value:
        return True
    try:
        return parse_iso(value) < datetime.now(timezone.utc)
    except ValueError:
        return True


@contextmanager
def store_errors(error_cls: type[AppError]) -> Iterator[None]:
    """Translate unexpected SQLAlchemy failures into a generic *Failed error.

    Domain errors raised inside the block pass through untouched. Callers that
    need to react to a unique violation catch IntegrityError INSIDE the block,
    before it reaches this wrapper.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store operation failed (%s)", error_cls.code)
        raise error_cls() from exc
