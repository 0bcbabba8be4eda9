"""
Signal

Synchronous observer registry for session lifecycle notifications.

Design:
- connect() registers a handler and returns a callable that removes it
- emit() calls handlers in registration order, on the caller's stack
- Dispatch iterates over a snapshot, so handlers may unsubscribe themselves
- A failing handler is logged and does not stop delivery to the others
"""

import logging
from typing import Callable

from iotapps.events.models import AuthEvent

logger = logging.getLogger(__name__)

Handler = Callable[[AuthEvent], None]


class Signal:
    """
    A named multi-subscriber event.

    Usage:
        unsubscribe = auth.on_login.connect(lambda event: print(event.username))
        ...
        unsubscribe()
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: list[Handler] = []

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def connect(self, handler: Handler) -> Callable[[], None]:
        """
        Register a handler.

        Args:
            handler: Called with the AuthEvent on every emit

        Returns:
            Function that unregisters this handler (safe to call twice)
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            self.disconnect(handler)

        return unsubscribe

    def disconnect(self, handler: Handler) -> bool:
        """Remove a handler. Returns False if it was not registered."""
        try:
            self._handlers.remove(handler)
            return True
        except ValueError:
            return False

    def emit(self, event: AuthEvent) -> int:
        """
        Deliver an event to all handlers.

        Returns:
            Number of handlers that ran without raising
        """
        delivered = 0
        for handler in list(self._handlers):
            try:
                handler(event)
                delivered += 1
            except Exception:
                logger.exception(f"Handler for signal '{self.name}' failed")
        return delivered

    def clear(self) -> None:
        self._handlers.clear()
