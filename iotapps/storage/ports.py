"""
Storage Port Interfaces

Abstract base class defining the persistent key-value contract used to keep
the API key across process restarts.
All persistence APIs are async. No sync DB calls allowed.

These ports follow the hexagonal architecture pattern:
- Session code depends only on this interface
- Adapters (in-memory, SQLAlchemy, Redis) implement it
- Storage is injected via dependency inversion

Values are always strings. Callers serialize dates and numbers themselves.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """
    Durable string key-value storage.

    Semantics:
    - get() of a missing key returns None
    - set() overwrites
    - remove() of a missing key is a no-op
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            Stored value or None if absent
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Write a value.

        Args:
            key: Storage key
            value: String value to persist

        Raises:
            StorageError: If the write fails
        """
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Delete a value if present.

        Args:
            key: Storage key
        """
        ...

    async def close(self) -> None:
        """
        Release connections.

        Called during shutdown.
        """
        # Implementations should override to close DB connections, etc.
        pass


# =============================================================================
# Exceptions
# =============================================================================

class StorageError(Exception):
    """Base exception for storage errors."""
    pass
