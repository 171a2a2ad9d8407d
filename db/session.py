"""
SQLAlchemy session factory.

Reads connection parameters from environment variables and provides a
``SessionLocal`` sessionmaker plus a ``get_session`` context manager.

Environment variables
---------------------
``DATABASE_URL``
    Full SQLAlchemy connection URL.  Default:
    ``sqlite:///data/practice.db``

``DB_POOL_SIZE``
    Number of persistent connections in the pool (default ``5``).
    Ignored for SQLite.

``DB_MAX_OVERFLOW``
    Extra connections allowed above ``pool_size`` under burst
    load (default ``10``).  Ignored for SQLite.
"""

import os
from collections.abc import Generator
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

load_dotenv()

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///data/practice.db")

_pool_size: int = int(os.getenv("DB_POOL_SIZE", "5"))
_max_overflow: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))


def sqlite_file_path(url: str) -> Path | None:
    """Return the database file of a SQLite URL, or None for other URLs and ``:memory:``."""
    if not url.startswith("sqlite"):
        return None
    db_path = url.split("///", 1)[-1]
    if not db_path or db_path == ":memory:":
        return None
    return Path(db_path)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str = DATABASE_URL) -> Engine:
    """
    Create an engine for ``url``.

    SQLite URLs get ``check_same_thread=False`` (FastAPI runs sync routes in
    a thread pool) and foreign-key enforcement.  Other backends get a sized,
    pre-pinged pool.  Nothing touches the disk until the first connection.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=_pool_size,
        max_overflow=_max_overflow,
    )


engine = build_engine()

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def get_session() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session, closing it on exit."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
