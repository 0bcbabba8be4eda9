"""
Client Configuration

Settings for IotAppsClient, read from environment variables.
Environment variables can be loaded from a .env file in the working directory.

Environment variables:
    IOTAPPS_API_URL: Server root (default: https://app.peoplepowerco.com)
    IOTAPPS_REQUEST_TIMEOUT: Total request timeout in seconds (default: 30)
    IOTAPPS_REFRESH_GRACE: Seconds before expiry to refresh the key (default: 120)
    IOTAPPS_STORAGE_BACKEND, IOTAPPS_DATABASE_URL, IOTAPPS_REDIS_URL, ...:
        see iotapps.storage.factory
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv

from iotapps.api.client import DEFAULT_API_URL
from iotapps.auth.manager import DEFAULT_REFRESH_GRACE
from iotapps.storage import StorageSettings, storage_settings_from_env


@dataclass
class ClientSettings:
    """
    Configuration for IotAppsClient.

    Attributes:
        api_url: Server root, without trailing slash
        request_timeout: Total request timeout in seconds
        refresh_grace: How long before expiry the API key is refreshed
        storage: Where the API key is persisted
    """
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 30.0
    refresh_grace: timedelta = DEFAULT_REFRESH_GRACE
    storage: StorageSettings = field(default_factory=StorageSettings)


def settings_from_env(dotenv: bool = True) -> ClientSettings:
    """
    Create ClientSettings from environment variables.

    Args:
        dotenv: Load a .env file first (existing variables win)
    """
    if dotenv:
        load_dotenv()

    return ClientSettings(
        api_url=os.getenv("IOTAPPS_API_URL", DEFAULT_API_URL),
        request_timeout=float(os.getenv("IOTAPPS_REQUEST_TIMEOUT", "30")),
        refresh_grace=timedelta(
            seconds=float(
                os.getenv(
                    "IOTAPPS_REFRESH_GRACE",
                    str(DEFAULT_REFRESH_GRACE.total_seconds()),
                )
            )
        ),
        storage=storage_settings_from_env(),
    )
