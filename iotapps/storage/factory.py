"""
Storage Factory

Environment-based configuration and factory for the key-value store.
Returns a KeyValueStore with the appropriate implementation based on settings.

Supported backends:
- memory: In-memory storage (testing, throwaway scripts)
- sqlite: SQLite with aiosqlite (single host, survives restarts)
- postgresql: PostgreSQL with asyncpg
- mysql: MySQL with aiomysql
- redis: Redis (shared between processes)

Usage:
    # From environment
    store = await create_store_from_env()

    # From settings
    settings = StorageSettings(database_url="sqlite:///iotapps.db")
    store = await create_store(settings)

    # Use in session manager
    manager = SessionManager(transport=transport, storage=store)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from .ports import KeyValueStore
from .memory import InMemoryKeyValueStore
from .sqlalchemy import SqlAlchemyKeyValueStore
from .models import Base


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    REDIS = "redis"


@dataclass
class StorageSettings:
    """
    Configuration for the storage layer.

    Attributes:
        backend: Storage backend type
        database_url: SQLAlchemy connection URL (for SQL backends)
        redis_url: Redis connection URL (for the redis backend)
        pool_size: Connection pool size for server databases
        pool_max_overflow: Max overflow for connection pool
        echo_sql: Whether to log SQL queries
        create_tables: Whether to auto-create tables on startup
        key_prefix: Prefix for stored keys (multi-tenant isolation)
    """
    backend: StorageBackend = StorageBackend.MEMORY
    database_url: str | None = None
    redis_url: str | None = None
    pool_size: int = 5
    pool_max_overflow: int = 10
    echo_sql: bool = False
    create_tables: bool = True
    key_prefix: str = "iotapps"


def _parse_database_url(url: str) -> StorageBackend:
    """Determine backend from database URL."""
    if url.startswith("sqlite"):
        return StorageBackend.SQLITE
    elif url.startswith("postgresql") or url.startswith("postgres"):
        return StorageBackend.POSTGRESQL
    elif url.startswith("mysql"):
        return StorageBackend.MYSQL
    elif url.startswith("redis"):
        return StorageBackend.REDIS
    else:
        raise ValueError(f"Unsupported database URL scheme: {url}")


def storage_settings_from_env() -> StorageSettings:
    """
    Create StorageSettings from environment variables.

    Environment variables:
        IOTAPPS_STORAGE_BACKEND: "memory", "sqlite", "postgresql", "mysql", "redis"
        IOTAPPS_DATABASE_URL: SQLAlchemy connection URL
        IOTAPPS_REDIS_URL: Redis connection URL
        IOTAPPS_POOL_SIZE: Connection pool size
        IOTAPPS_ECHO_SQL: "true" to log SQL
        IOTAPPS_CREATE_TABLES: "false" to disable table creation
        IOTAPPS_KEY_PREFIX: Key prefix
    """
    database_url = os.getenv("IOTAPPS_DATABASE_URL")
    redis_url = os.getenv("IOTAPPS_REDIS_URL")
    backend_str = os.getenv("IOTAPPS_STORAGE_BACKEND", "memory")

    # Auto-detect backend from URL if provided
    if backend_str == "memory" and database_url:
        backend = _parse_database_url(database_url)
    elif backend_str == "memory" and redis_url:
        backend = StorageBackend.REDIS
    else:
        backend = StorageBackend(backend_str)

    return StorageSettings(
        backend=backend,
        database_url=database_url,
        redis_url=redis_url,
        pool_size=int(os.getenv("IOTAPPS_POOL_SIZE", "5")),
        pool_max_overflow=int(os.getenv("IOTAPPS_POOL_MAX_OVERFLOW", "10")),
        echo_sql=os.getenv("IOTAPPS_ECHO_SQL", "").lower() == "true",
        create_tables=os.getenv("IOTAPPS_CREATE_TABLES", "true").lower() != "false",
        key_prefix=os.getenv("IOTAPPS_KEY_PREFIX", "iotapps"),
    )


def _async_url(backend: StorageBackend, url: str) -> str:
    """Ensure an async driver is in the URL."""
    if backend == StorageBackend.SQLITE:
        if "+aiosqlite" not in url:
            url = url.replace("sqlite://", "sqlite+aiosqlite://")
    elif backend == StorageBackend.POSTGRESQL:
        if "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://")
            url = url.replace("postgres://", "postgresql+asyncpg://")
    elif backend == StorageBackend.MYSQL:
        if "+aiomysql" not in url:
            url = url.replace("mysql://", "mysql+aiomysql://")
    return url


async def create_store(settings: StorageSettings) -> KeyValueStore:
    """
    Create a key-value store from settings.

    Args:
        settings: Storage configuration

    Returns:
        Configured KeyValueStore

    Raises:
        ValueError: If settings are invalid
    """
    if settings.backend == StorageBackend.MEMORY:
        return InMemoryKeyValueStore()

    if settings.backend == StorageBackend.REDIS:
        url = settings.redis_url or settings.database_url
        if not url:
            raise ValueError("redis_url required for backend redis")
        from redis.asyncio import Redis
        from .redis import RedisKeyValueStore

        return RedisKeyValueStore(
            redis=Redis.from_url(url, decode_responses=True),
            key_prefix=settings.key_prefix,
        )

    if not settings.database_url:
        raise ValueError(
            f"database_url required for backend {settings.backend}"
        )

    url = _async_url(settings.backend, settings.database_url)
    if settings.backend == StorageBackend.SQLITE:
        # SQLite pools do not accept sizing arguments
        engine = create_async_engine(url, echo=settings.echo_sql)
    else:
        engine = create_async_engine(
            url,
            pool_size=settings.pool_size,
            max_overflow=settings.pool_max_overflow,
            echo=settings.echo_sql,
        )

    if settings.create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return SqlAlchemyKeyValueStore(
        session_factory,
        key_prefix=settings.key_prefix,
        engine=engine,
    )


async def create_store_from_env() -> KeyValueStore:
    """
    Create a key-value store from environment variables.

    Convenience function that combines storage_settings_from_env() and create_store().
    """
    return await create_store(storage_settings_from_env())


async def create_sqlite_store(
    path: str = "iotapps.db",
    create_tables: bool = True,
    key_prefix: str = "iotapps",
) -> KeyValueStore:
    """Create a SQLite-backed store at the given file path."""
    return await create_store(StorageSettings(
        backend=StorageBackend.SQLITE,
        database_url=f"sqlite+aiosqlite:///{path}",
        create_tables=create_tables,
        key_prefix=key_prefix,
    ))
