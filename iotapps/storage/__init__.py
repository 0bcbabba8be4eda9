# Storage Layer
# Pluggable persistence for the API key and its expiry
#
# This module provides:
# - Port interface (ABC) defining the key-value contract
# - In-memory implementation for testing
# - SQLAlchemy implementation for persistence across restarts
# - Redis implementation for shared state between processes
# - Factory for configuration-based adapter selection

from .ports import (
    KeyValueStore,
    StorageError,
)
from .memory import InMemoryKeyValueStore
from .factory import (
    StorageSettings,
    StorageBackend,
    create_store,
    create_store_from_env,
    create_sqlite_store,
    storage_settings_from_env,
)

__all__ = [
    # Ports
    "KeyValueStore",
    "StorageError",
    # Adapters
    "InMemoryKeyValueStore",
    # Factory
    "StorageSettings",
    "StorageBackend",
    "create_store",
    "create_store_from_env",
    "create_sqlite_store",
    "storage_settings_from_env",
]
