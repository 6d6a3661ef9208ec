"""Engine and session setup for the member portal record store."""

from __future__ import annotations

import os
from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

DEFAULT_DATABASE_URL = "sqlite:///./data/portal.db"


def _is_sqlite(database_url: str) -> bool:
    return make_url(database_url).get_backend_name() == "sqlite"


def _ensure_sqlite_directory(database_url: str) -> None:
    path = make_url(database_url).database
    if path and path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    # SQLite ignores REFERENCES clauses unless enabled per connection.
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str) -> Engine:
    if not _is_sqlite(database_url):
        return create_engine(database_url, pool_pre_ping=True)

    _ensure_sqlite_directory(database_url)
    engine = create_engine(database_url, connect_args={"check_same_thread": False})
    _enable_sqlite_foreign_keys(engine)
    return engine


def _session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False, class_=Session)


engine = build_engine(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))
SessionLocal = _session_factory(engine)
Base = declarative_base()


def reset_engine(database_url: str) -> None:
    """Rebind the portal to another database, e.g. a per-test SQLite file."""
    global engine, SessionLocal
    engine.dispose()
    engine = build_engine(database_url)
    SessionLocal = _session_factory(engine)


def init_db() -> None:
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
