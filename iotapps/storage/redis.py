"""
Redis Storage Adapter

Redis-based implementation of KeyValueStore.
Ideal for hosts running several processes that share one login.

Uses redis.asyncio for async operations.
"""

from __future__ import annotations

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .ports import KeyValueStore, StorageError


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-based key-value store.

    Key pattern: {key_prefix}:kv:{key} -> value

    No TTL is applied: the API key expiry is managed by the session layer.
    """

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "iotapps",
        owns_client: bool = True,
    ) -> None:
        """
        Initialize Redis store.

        Args:
            redis: Redis async client
            key_prefix: Prefix for all keys (multi-tenant isolation)
            owns_client: Close the client in close()
        """
        self._redis = redis
        self._prefix = key_prefix
        self._owns_client = owns_client

    def _key(self, key: str) -> str:
        return f"{self._prefix}:kv:{key}"

    async def get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self._redis.set(self._key(key), value)
        except RedisError as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    async def remove(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except RedisError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e

    async def close(self) -> None:
        if self._owns_client:
            await self._redis.aclose()
