"""
Session Model

The credential state held by a SessionManager.

Timer Lifecycle:
1. UNARMED - No refresh scheduled (no key, or key already expired)
2. ARMED - Refresh scheduled GRACE before the key expires
3. FIRED - Timer went off, refresh in flight
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

# Store keys
STORAGE_API_KEY = "Auth-Key"
STORAGE_API_KEY_EXPIRE = "Auth-KeyExpire"
STORAGE_API_KEY_EXPIRE_PERIOD = "Auth-KeyExpirePeriod"
STORAGE_LAST_USERNAME = "Auth-Username"


class TimerState(str, Enum):
    """Expiry timer states."""
    UNARMED = "unarmed"
    ARMED = "armed"
    FIRED = "fired"


class Session(BaseModel):
    """
    Current API key and its expiry.

    Mutated in place. Without a token there is no expiry state.
    """
    token: str | None = Field(
        default=None,
        description="API key sent in the API_KEY header"
    )
    expires_at: datetime | None = Field(
        default=None,
        description="When the server invalidates the key (UTC)"
    )
    expire_period_ms: int | None = Field(
        default=None,
        description="Validity period of the key when it was issued"
    )
    last_username: str | None = Field(
        default=None,
        description="Username of the last password/passcode login"
    )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def clear_expiry(self) -> None:
        self.expires_at = None
        self.expire_period_ms = None
