"""
In-Memory Storage Adapter

Everything is lost on restart.
Use for:
- Unit/integration testing
- Short-lived scripts that log in on every run
"""

import asyncio

from iotapps.storage.ports import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """
    In-memory key-value storage.

    Uses dict with asyncio.Lock for concurrent async safety.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value

    async def remove(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the current contents (for tests and debugging)."""
        return dict(self._data)
