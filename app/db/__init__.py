"""Database package: `from app.db import get_db, Base, ...`."""

from .session import (
    engine,
    AsyncSessionLocal,
    Base,
    get_db,
    init_db,
    close_db,
)

__all__ = [
    "engine",
    "AsyncSessionLocal",
    "Base",
    "get_db",
    "init_db",
    "close_db",
]
