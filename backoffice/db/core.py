# backoffice/db/core.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from backoffice.common import settings
from backoffice.common.errors import PersistenceError

logger = logging.getLogger(__name__)


# ============================================================
# Engine
# ============================================================

def resolve_database_url() -> str:
    """
    DB URL resolution, single source of truth.

    1) env DATABASE_URL
    2) default sqlite:///./app.db
    """
    return settings.database_url()


def create_db_engine(
    url: Optional[str] = None,
    *,
    pool_size: Optional[int] = None,
    max_overflow: Optional[int] = None,
    pool_timeout: Optional[int] = None,
) -> Engine:
    """
    Build a pooled engine.

    A QueuePool is used for every URL (SQLite files included) so that a
    checked-out connection is always a real pool slot and exhaustion surfaces
    as a pool timeout.
    """
    url = url or resolve_database_url()

    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}

    engine = create_engine(
        url,
        connect_args=connect_args,
        poolclass=QueuePool,
        pool_size=pool_size if pool_size is not None else settings.pool_size(),
        max_overflow=(
            max_overflow if max_overflow is not None else settings.pool_max_overflow()
        ),
        pool_timeout=(
            pool_timeout if pool_timeout is not None else settings.pool_timeout()
        ),
    )

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """
    Process-wide engine (FastAPI dependency).

    Tests replace it through app.dependency_overrides[get_engine].
    """
    global _engine
    if _engine is None:
        _engine = create_db_engine()
        logger.info("[BOOT] engine created dialect=%s", _engine.dialect.name)
    return _engine


# ============================================================
# Scoped connections
# ============================================================

def _checkout(engine: Engine) -> Connection:
    try:
        return engine.connect()
    except SQLAlchemyError as e:
        # pool exhaustion (TimeoutError) lands here too
        raise PersistenceError(f"could not acquire a database connection: {e}") from e


@contextmanager
def transaction(engine: Engine) -> Iterator[Connection]:
    """
    One unit of work on a dedicated connection.

    - checkout -> BEGIN -> (caller's statements) -> COMMIT
    - any exception -> ROLLBACK, then re-raise
    - the connection goes back to the pool on every exit path

    SQLAlchemyError is re-raised as PersistenceError (after the rollback).
    Domain errors such as NotFound pass through unchanged.
    """
    conn = _checkout(engine)
    try:
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except BaseException:
            if trans.is_active:
                trans.rollback()
            raise
    except SQLAlchemyError as e:
        logger.warning("transaction rolled back: %s", e.__class__.__name__)
        raise PersistenceError(str(getattr(e, "orig", None) or e)) from e
    finally:
        conn.close()


@contextmanager
def read_connection(engine: Engine) -> Iterator[Connection]:
    """Read-only checkout with the same release and error rules."""
    conn = _checkout(engine)
    try:
        yield conn
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e
    finally:
        conn.close()
