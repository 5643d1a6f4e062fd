"""Async database engine, session factory and declarative base."""

import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def configure_sqlite_transactions(async_engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy emit BEGIN IMMEDIATE itself on SQLite.

    The sqlite3 driver otherwise delays BEGIN until the first DML statement,
    which breaks SAVEPOINT (used when recording refresh tokens). IMMEDIATE
    takes the write lock when the transaction starts, so two requests rotating
    the same refresh token run one after the other: the second reads the row
    the first already revoked instead of failing to upgrade a shared lock.
    """
    if async_engine.dialect.name != "sqlite":
        return

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_async_engine(settings.database_url, echo=False)
configure_sqlite_transactions(engine)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request: commit on success, roll back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables that do not exist yet."""
    # Registers every model on Base.metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
    logger.info("Database engine disposed")
