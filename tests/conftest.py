"""Shared fixtures: in-process credential transport, store and manager."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from iotapps.auth import CredentialTransport, SessionManager
from iotapps.events import AuthEvent
from iotapps.models import (
    ApiResponseBase,
    KeyType,
    LoginApiResponse,
    LogoutApiResponse,
    PasscodeType,
    SendPasscodeApiResponse,
)
from iotapps.storage import InMemoryKeyValueStore


def expire_in(delta: timedelta) -> str:
    """ISO-8601 expiry `delta` from now."""
    return (datetime.now(timezone.utc) + delta).isoformat()


async def wait_for(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


class FakeCredentialTransport(CredentialTransport):
    """
    In-process transport.

    Responses are configured per call name; an exception in `errors` is
    raised instead. `gate`, when set, blocks login_by_key until released.
    """

    def __init__(self):
        self.calls: list[tuple[str, dict]] = []
        self.errors: dict[str, Exception] = {}
        self.login_response = LoginApiResponse(
            key="user-key-1",
            key_expire=expire_in(timedelta(hours=1)),
        )
        self.login_by_key_response = LoginApiResponse(
            key="user-key-2",
            key_expire=expire_in(timedelta(hours=1)),
        )
        self.gate: asyncio.Event | None = None

    def _record(self, name: str, **kwargs) -> None:
        self.calls.append((name, kwargs))
        if name in self.errors:
            raise self.errors[name]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def last_call(self, name: str) -> dict:
        return [kwargs for call, kwargs in self.calls if call == name][-1]

    async def login_by_password(self, username, password, key_type=None):
        self._record("login_by_password", username=username, password=password, key_type=key_type)
        return self.login_response

    async def login_by_passcode(self, username, passcode, key_type=KeyType.USER):
        self._record("login_by_passcode", username=username, passcode=passcode, key_type=key_type)
        return self.login_response

    async def login_by_key(self, api_key=None, key_type=None):
        if self.gate is not None:
            await self.gate.wait()
        self._record("login_by_key", api_key=api_key, key_type=key_type)
        return self.login_by_key_response

    async def send_passcode(
        self,
        username,
        passcode_type=PasscodeType.SMS,
        key_type=KeyType.USER,
        brand=None,
    ):
        self._record(
            "send_passcode",
            username=username,
            passcode_type=passcode_type,
            key_type=key_type,
            brand=brand,
        )
        return SendPasscodeApiResponse()

    async def logout(self):
        self._record("logout")
        return LogoutApiResponse()

    async def set_new_password(
        self,
        new_password,
        old_password,
        passcode=None,
        brand=None,
        app_name=None,
    ):
        self._record(
            "set_new_password",
            new_password=new_password,
            old_password=old_password,
            passcode=passcode,
        )
        return ApiResponseBase()

    async def set_new_password_by_temp_key(
        self,
        new_password,
        temp_key,
        brand=None,
        app_name=None,
        passcode=None,
    ):
        self._record(
            "set_new_password_by_temp_key",
            new_password=new_password,
            temp_key=temp_key,
        )
        return ApiResponseBase()

    def get_authorization_url(
        self,
        approved,
        client_id,
        response_type,
        api_key,
        state=None,
        location_id=None,
        brand=None,
    ):
        self._record("get_authorization_url", approved=approved, client_id=client_id)
        return f"https://example.test/authorize?client_id={client_id}&approve={approved}"


class EventRecorder:
    """Collects events from a manager's signals."""

    def __init__(self, manager: SessionManager):
        self.events: list[AuthEvent] = []
        for signal in (manager.on_login, manager.on_logout, manager.on_need_relogin):
            signal.connect(self.events.append)

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]

    def reasons(self, event_type: str) -> list[str | None]:
        return [e.reason for e in self.events if e.event_type.value == event_type]


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def transport() -> FakeCredentialTransport:
    return FakeCredentialTransport()


@pytest.fixture
async def manager(transport, store):
    manager = SessionManager(transport=transport, storage=store)
    await manager.start()
    yield manager
    await manager.stop()


@pytest.fixture
def recorder(manager) -> EventRecorder:
    return EventRecorder(manager)
