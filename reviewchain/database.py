"""
Database Configuration Module

SQLAlchemy 2.0 setup for the SQL Review Store.

We're using SYNCHRONOUS SQLAlchemy. FastAPI runs the sync route handlers
in its worker thread pool, and each store operation opens its own short-lived
session from the factory below (session per operation).

The engine is created lazily on first use, so selecting the json or memory
store never touches a database.

Any SQLAlchemy URL works. The default is a SQLite file under ./data; for
PostgreSQL install the "postgres" extra and set DATABASE_URL.
"""

from datetime import UTC, datetime
from functools import lru_cache
from pathlib import Path

from sqlalchemy import DateTime, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.types import TypeDecorator

from reviewchain.config import get_settings


# =============================================================================
# Column Types
# =============================================================================


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime column.

    SQLite has no timezone support and returns naive datetimes. This type
    converts to UTC on the way in and re-attaches UTC on the way out, so
    values read back compare equal to the values written.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


# =============================================================================
# Base Model Class
# =============================================================================


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Alembic uses Base.metadata to discover tables for migrations.
    """
    pass


# =============================================================================
# Database Engine
# =============================================================================


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for a database URL.

    Key parameters:
    - pool_size / max_overflow: connection pool bounds (ignored for SQLite)
    - pool_pre_ping: test connection health before using
    - check_same_thread=False: let SQLite connections cross worker threads

    For SQLite file databases the parent directory is created.
    """
    settings = get_settings()
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=echo,
    )


@lru_cache
def get_engine() -> Engine:
    """Application engine built from settings (created once)."""
    settings = get_settings()
    return build_engine(settings.database_url, echo=settings.debug)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """
    Create a session factory bound to an engine.

    - autocommit=False: we control when to commit
    - autoflush=False: don't auto-flush before queries
    - expire_on_commit=False: objects stay readable after the session closes
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


# =============================================================================
# Utility Functions
# =============================================================================


def create_tables(engine: Engine | None = None) -> None:
    """
    Create all database tables.

    Useful for development and tests. In production, use Alembic
    migrations instead.
    """
    # Register the models with Base.metadata
    import reviewchain.models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """
    Drop all database tables.

    DANGER: This deletes all data! Only use in development and tests.
    """
    import reviewchain.models  # noqa: F401

    Base.metadata.drop_all(bind=engine or get_engine())
