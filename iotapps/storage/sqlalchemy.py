"""
SQLAlchemy Storage Adapter

Async SQLAlchemy 2.0 implementation for persistence across restarts.
Uses async engine and session for all operations.

Compatible with:
- SQLite (aiosqlite)
- PostgreSQL (asyncpg)
- MySQL (aiomysql)
"""

import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    async_sessionmaker,
)

from iotapps.storage.ports import KeyValueStore, StorageError
from iotapps.storage.models import KeyValueModel

logger = logging.getLogger(__name__)


class SqlAlchemyKeyValueStore(KeyValueStore):
    """
    SQLAlchemy implementation of key-value storage.

    Key pattern: {key_prefix}:{key}
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        key_prefix: str = "iotapps",
        engine: AsyncEngine | None = None,
    ):
        """
        Initialize SQLAlchemy store.

        Args:
            session_factory: Async session factory bound to the engine
            key_prefix: Prefix for all keys
            engine: Engine to dispose on close() (if this store owns it)
        """
        self._session_factory = session_factory
        self._prefix = key_prefix
        self._engine = engine

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                model = await session.get(KeyValueModel, self._key(key))
                if model is None:
                    return None
                return model.value
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    existing = await session.get(KeyValueModel, self._key(key))
                    if existing is None:
                        session.add(KeyValueModel(key=self._key(key), value=value))
                    else:
                        existing.value = value
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    async def remove(self, key: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        delete(KeyValueModel).where(KeyValueModel.key == self._key(key))
                    )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
            logger.debug("SQLAlchemy engine disposed")
