"""
Key-value store backed by the kv_store table

Each operation runs in its own short transaction. There is no
compare-and-swap: callers own any read-modify-write races.
"""

from typing import Protocol

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from co2alert.core.exceptions import StateStoreError
from co2alert.models.kv_entry import KeyValueEntry


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class SqlKeyValueStore:
    """KeyValueStore on top of an async SQLAlchemy session factory."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def get(self, key: str) -> str | None:
        async with self.session_maker() as session:
            try:
                entry = await session.get(KeyValueEntry, key)
            except SQLAlchemyError as e:
                raise StateStoreError(f"Failed to read key {key!r}: {e}") from e
            return entry.value if entry else None

    async def put(self, key: str, value: str) -> None:
        async with self.session_maker() as session:
            try:
                entry = await session.get(KeyValueEntry, key)
                if entry:
                    entry.value = value
                else:
                    session.add(KeyValueEntry(key=key, value=value))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StateStoreError(f"Failed to write key {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        async with self.session_maker() as session:
            try:
                await session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StateStoreError(f"Failed to delete key {key!r}: {e}") from e
