"""SQLite backing store for device-local storage.

The resume document and the theme preference are kept in one small SQLite
file, which plays the part of the browser's local storage for this device.
``DB_URL`` overrides the location (tests point it at a temporary file);
otherwise the file lives at ``~/.resume_builder/storage.db``.

The engine is created on first use and creates its tables at the same time,
so callers only ever need ``get_session``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)

DATA_DIR_NAME = ".resume_builder"
DB_FILENAME = "storage.db"


class Base(DeclarativeBase):
    """Declarative base for the storage tables."""


_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def default_database_path() -> Path:
    return Path.home() / DATA_DIR_NAME / DB_FILENAME


def get_database_url() -> str:
    """Return ``DB_URL`` if set, else a SQLite URL for the default file."""
    env_url = os.getenv("DB_URL")
    if env_url:
        return env_url
    return URL.create("sqlite", database=str(default_database_path())).render_as_string(
        hide_password=False
    )


def _prepare_sqlite_file(url: URL) -> None:
    # SQLite creates the file but not its parent directory.
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def _connect() -> tuple[Engine, sessionmaker[Session]]:
    global _engine, _SessionLocal
    if _engine is None or _SessionLocal is None:
        url = make_url(get_database_url())
        _prepare_sqlite_file(url)
        connect_args = {"check_same_thread": False} if url.get_backend_name() == "sqlite" else {}
        _engine = create_engine(url, connect_args=connect_args)

        # Registers the table on Base.metadata.
        from resume_builder.data.models import storage_entry  # noqa: F401

        Base.metadata.create_all(bind=_engine)
        _SessionLocal = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
        logger.debug("Opened local storage at %s", url.render_as_string(hide_password=True))
    return _engine, _SessionLocal


def init_db() -> None:
    """Open the database and create missing tables now rather than on first use."""
    _connect()


def dispose_engine() -> None:
    """Close pooled connections; the next access re-reads ``DB_URL``."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session that commits on success and rolls back on error."""
    _, session_factory = _connect()
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
