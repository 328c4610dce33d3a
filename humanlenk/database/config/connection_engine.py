"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds a SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Uses `URL.create(...)` to avoid hardcoding credentials and to keep configuration
  environment-driven (e.g., via `.env`, container secrets, or deployment vars).
- The engine is built by the application lifespan and disposed on shutdown;
  nothing here opens a connection at import time.
- All ORM models must inherit from `declarativeBase` to participate in schema reflection
  and enable ORM features.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import MetaData

from humanlenk.database.config.config import Settings

metadata = MetaData()
"""
Metadata object: Stores schema-level information about tables, constraints, indexes, etc. Shared across all models.
"""

declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models.
All model classes should inherit from this to gain ORM features and automatic schema generation.
"""


def build_connection_url(settings: Settings) -> URL:
    """Construct the SQLAlchemy connection URL using values from Settings."""
    return URL.create(
        drivername=settings.DB_DRIVER_NAME,   # e.g., "postgresql+psycopg2", "sqlite"
        username=settings.DB_USERNAME,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        database=settings.DB_DATABASE_NAME,
    )


def build_engine(settings: Settings) -> Engine:
    """
    Create the process-wide Engine.

    SQLite gets `check_same_thread=False` because FastAPI serves requests from a
    threadpool; an in-memory SQLite database is pinned to a single connection
    (`StaticPool`) so every session sees the same data.
    """
    url = build_connection_url(settings)
    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to `engine`. Objects stay readable after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)
