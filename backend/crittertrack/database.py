"""
CritterTrack Backend — Database Engine & Session Factory
========================================================

What:  Async SQLAlchemy engine construction, session factory and ORM base.
Why:   Centralizes all database connection logic in one place.
How:   `build_engine()` turns Settings into an AsyncEngine with a bounded
       connection pool; `build_session_factory()` wraps it. The SQL
       credential store owns both for the life of the process.
Who:   Used by SqlCredentialStore, Alembic and the test suite.

Connection Pooling Strategy:
    pool_size=3:      Persistent connections (the whole pool by default)
    max_overflow=0:   No burst connections; extra work queues instead
    pool_timeout=30:  How long a queued operation waits for a connection
                      before surfacing as StoreUnavailableError
    pool_pre_ping:    Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

Isolation:
    PostgreSQL keeps its default READ COMMITTED. A registration checks the
    email and inserts in one transaction; the unique index on users.email
    rejects the loser of a concurrent race, which the store reports as None.
    SQLite (tests, local dev) starts every transaction with BEGIN IMMEDIATE,
    which serializes writers and makes the same check+insert atomic.
"""

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from crittertrack.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a single metadata
    object, which Alembic reads for migrations and tests use for create_all.
    """
    pass


def is_sqlite_url(database_url: str) -> bool:
    return make_url(database_url).get_backend_name() == "sqlite"


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by `settings`.

    SQLite gets driver-level transaction control handed to SQLAlchemy and
    foreign keys switched on; other backends get the bounded pool at the
    server's default isolation level.
    """
    echo = settings.log_level == "DEBUG"

    if is_sqlite_url(settings.database_url):
        engine = create_async_engine(settings.database_url, echo=echo)
        _configure_sqlite(engine)
        return engine

    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )


def _configure_sqlite(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself (see _on_begin)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Creates new AsyncSession instances with consistent configuration.

    expire_on_commit=False: records are converted to plain dataclasses
    after commit, outside the session's lazy-loading reach.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
