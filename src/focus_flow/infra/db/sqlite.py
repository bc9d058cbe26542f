"""Async SQLite plumbing for the local key/value store."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

SQLITE_DRIVER = "sqlite+aiosqlite"


def make_sqlite_url(db_path: Union[str, Path]) -> str:
    """aiosqlite URL for the absolute form of `db_path`. Creates the parent directory."""
    path = Path(db_path).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"{SQLITE_DRIVER}:///{path.as_posix()}"


def make_engine(sqlite_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(sqlite_url, echo=echo)


def engine_for(db_path: Union[str, Path]) -> AsyncEngine:
    return make_engine(make_sqlite_url(db_path))


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # values are read back after commit
    return async_sessionmaker(engine, expire_on_commit=False)
