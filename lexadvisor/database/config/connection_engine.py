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
- Uses `URL.create(...)` so credentials stay environment-driven.
- SQLite is supported for local development and tests. Every SQLite
  connection switches `foreign_keys` on, otherwise the cascade rules declared
  on the entities (conversation -> messages, document -> embeddings) are
  silently ignored.
- An in-memory SQLite database is shared across threads through a
  `StaticPool`, since FastAPI runs sync handlers in a worker thread.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import MetaData
from lexadvisor.database.config.config import settings

connection_url = URL.create(
    drivername=settings.DB_DRIVER_NAME,
    username=settings.DB_USERNAME,
    password=settings.DB_PASSWORD,
    host=settings.DB_HOST,
    database=settings.DB_DATABASE_NAME,
)
"""Constructs the SQLAlchemy connection URL using values from Settings."""


def _engine_options(url: URL) -> dict:
    """Return driver specific `create_engine` keyword arguments."""
    if not url.drivername.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


connection_engine = create_engine(connection_url, **_engine_options(connection_url))
"""Engine object: Core interface to the database."""


@event.listens_for(connection_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    if connection_engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


metadata = MetaData()
"""Stores schema-level information about tables, constraints and indexes."""

declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models."""
