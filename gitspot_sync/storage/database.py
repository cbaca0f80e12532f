"""Async SQLAlchemy engine, session factory and schema management."""

import structlog
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from gitspot_sync.exceptions import StorageSchemaError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for every table the synchronization engine uses."""

    pass


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for ``database_url``."""
    logger.debug("Creating database engine", dialect=database_url.split(":", 1)[0])
    return create_async_engine(database_url, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory whose sessions keep loaded objects usable after commit."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> list[str]:
    """Create any missing tables and return the names of all managed tables."""
    # Imported for its side effect of registering the models on Base.metadata.
    from gitspot_sync.storage import models  # noqa: F401

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    table_names = sorted(Base.metadata.tables)
    logger.info("Initialized database schema", tables=table_names)
    return table_names


async def verify_schema(engine: AsyncEngine) -> None:
    """Raise StorageSchemaError if any managed table is missing from the database."""
    from gitspot_sync.storage import models  # noqa: F401

    async with engine.connect() as connection:
        existing = await connection.run_sync(lambda sync_connection: set(inspect(sync_connection).get_table_names()))
    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        logger.error("Database schema is incomplete", missing_tables=missing)
        raise StorageSchemaError(missing)
    logger.debug("Database schema verified", tables=sorted(existing))
