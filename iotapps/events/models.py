"""
Auth Event Models

Payloads delivered to session lifecycle listeners.

Design Principles:
- Events are immutable records
- Every event carries its type and the time it was emitted
- Optional context (username, reason) explains why it happened
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AuthEventType(str, Enum):
    """Session lifecycle event types."""
    LOGIN = "login"                # API key acquired
    LOGOUT = "logout"              # API key forgotten
    NEED_RELOGIN = "need_relogin"  # API key no longer usable, user must log in again
    UNAUTHORIZED = "unauthorized"  # Server answered 401


class AuthEvent(BaseModel):
    """A single session lifecycle event."""
    model_config = ConfigDict(frozen=True)

    event_type: AuthEventType = Field(
        ...,
        description="What happened"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event was emitted"
    )
    username: str | None = Field(
        default=None,
        description="Username involved, when known"
    )
    reason: str | None = Field(
        default=None,
        description="Why the event fired (e.g. 'expired', 'refresh_failed')"
    )


def create_login_event(username: str | None = None) -> AuthEvent:
    return AuthEvent(event_type=AuthEventType.LOGIN, username=username)


def create_logout_event() -> AuthEvent:
    return AuthEvent(event_type=AuthEventType.LOGOUT)


def create_need_relogin_event(reason: str) -> AuthEvent:
    return AuthEvent(event_type=AuthEventType.NEED_RELOGIN, reason=reason)


def create_unauthorized_event(path: str | None = None) -> AuthEvent:
    return AuthEvent(event_type=AuthEventType.UNAUTHORIZED, reason=path)
