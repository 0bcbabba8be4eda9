# Session Management
# API key lifecycle: login, persistence, timed refresh, logout

from iotapps.auth.ports import CredentialTransport
from iotapps.auth.session import Session, TimerState
from iotapps.auth.manager import (
    SessionManager,
    DEFAULT_REFRESH_GRACE,
    MAX_TIMER_DELAY,
    parse_key_expire,
)

__all__ = [
    "CredentialTransport",
    "Session",
    "TimerState",
    "SessionManager",
    "DEFAULT_REFRESH_GRACE",
    "MAX_TIMER_DELAY",
    "parse_key_expire",
]
