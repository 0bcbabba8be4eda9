# Session Lifecycle Events
# Observer registries and event payloads for login/logout/re-login notifications

from iotapps.events.models import (
    AuthEventType,
    AuthEvent,
    create_login_event,
    create_logout_event,
    create_need_relogin_event,
    create_unauthorized_event,
)
from iotapps.events.signal import Signal

__all__ = [
    # Event Models
    "AuthEventType",
    "AuthEvent",
    "create_login_event",
    "create_logout_event",
    "create_need_relogin_event",
    "create_unauthorized_event",
    # Observer Registry
    "Signal",
]
