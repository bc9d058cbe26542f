from __future__ import annotations
from typing import Optional, Protocol

from sqlalchemy import String, Text
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class KeyValueRow(Base):
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class SQLiteKeyValueStore:
    """
    String key/value store on one SQLite table.
    Plays the role browser localStorage plays for a web client:
    whole values in, whole values out.
    """

    def __init__(self, sessionmaker):
        self.sessionmaker = sessionmaker

    @staticmethod
    async def create_schema(engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def get(self, key: str) -> Optional[str]:
        async with self.sessionmaker() as session:
            row = await session.get(KeyValueRow, key)
            return row.value if row else None

    async def set(self, key: str, value: str) -> None:
        async with self.sessionmaker() as session:
            await session.merge(KeyValueRow(key=key, value=value))
            await session.commit()
