# IoT Apps SDK - async client for the IoT Apps smart-home cloud API
# Typed REST wrappers plus API key session management

__version__ = "0.1.0"

# Re-export commonly used components for convenience
from iotapps.client import IotAppsClient, create_client_from_env
from iotapps.config import ClientSettings, settings_from_env
from iotapps.auth import (
    CredentialTransport,
    SessionManager,
    TimerState,
)
from iotapps.events import AuthEvent, AuthEventType, Signal
from iotapps.errors import (
    IotAppsError,
    ValidationError,
    TransportError,
    ApiResultError,
    AuthError,
    UnauthorizedError,
    ExpiryError,
)

__all__ = [
    "__version__",
    # Client
    "IotAppsClient",
    "create_client_from_env",
    "ClientSettings",
    "settings_from_env",
    # Sessions
    "CredentialTransport",
    "SessionManager",
    "TimerState",
    # Events
    "AuthEvent",
    "AuthEventType",
    "Signal",
    # Errors
    "IotAppsError",
    "ValidationError",
    "TransportError",
    "ApiResultError",
    "AuthError",
    "UnauthorizedError",
    "ExpiryError",
]
