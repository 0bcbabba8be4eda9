"""HTTP layer: ApiClient error mapping, API wrappers and the wired client."""

from datetime import timedelta

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from iotapps import IotAppsClient, ClientSettings
from iotapps.api import ApiClient, AppApi, HttpCredentialTransport
from iotapps.errors import ApiResultError, AuthError, TransportError, UnauthorizedError
from iotapps.events import AuthEventType
from iotapps.models import (
    KeyType,
    LocationAccessLevel,
    LocationUser,
    LocationUsersModel,
    NarrativeType,
)
from iotapps.storage import InMemoryKeyValueStore, StorageBackend, StorageError, StorageSettings

from tests.conftest import EventRecorder, expire_in, wait_for


class FakeCloud:
    """Minimal stand-in for the cloud REST API."""

    def __init__(self):
        self.requests: list[dict] = []
        self.revoked: set[str] = set()

    def _seen(self, request: web.Request, body=None) -> None:
        self.requests.append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "headers": request.headers.copy(),
            "body": body,
        })

    def _check_key(self, request: web.Request) -> None:
        if request.headers.get("API_KEY") in self.revoked:
            raise web.HTTPUnauthorized()

    async def login(self, request: web.Request) -> web.Response:
        self._seen(request)
        if request.headers.get("PASSWORD") == "secret" or request.headers.get("PASSCODE"):
            return web.json_response({
                "resultCode": 0,
                "key": "key-1",
                "keyExpire": expire_in(timedelta(hours=1)),
            })
        return web.json_response({"resultCode": 2, "resultCodeMessage": "Wrong password"})

    async def login_by_key(self, request: web.Request) -> web.Response:
        self._seen(request)
        self._check_key(request)
        return web.json_response({
            "resultCode": 0,
            "key": "key-2",
            "keyExpire": expire_in(timedelta(hours=1)),
        })

    async def logout(self, request: web.Request) -> web.Response:
        self._seen(request)
        self._check_key(request)
        return web.json_response({"resultCode": 0})

    async def passcode(self, request: web.Request) -> web.Response:
        self._seen(request)
        return web.json_response({"resultCode": 0})

    async def new_password(self, request: web.Request) -> web.Response:
        self._seen(request)
        self._check_key(request)
        return web.json_response({"resultCode": 0})

    async def narratives(self, request: web.Request) -> web.Response:
        self._seen(request)
        self._check_key(request)
        return web.json_response({
            "resultCode": 0,
            "nextMarker": "marker-2",
            "narratives": [
                {
                    "id": 1,
                    "narrativeType": 0,
                    "locationId": int(request.match_info["location_id"]),
                    "title": "Front door opened",
                    "priority": 1,
                    "target": {"deviceId": "door-1"},
                },
                {
                    "id": 2,
                    "narrativeType": 1,
                    "locationId": int(request.match_info["location_id"]),
                    "user": {"id": 77, "userName": "bob", "passwordSet": True},
                },
            ],
        })

    async def add_users(self, request: web.Request) -> web.Response:
        body = await request.json()
        self._seen(request, body)
        self._check_key(request)
        return web.json_response({"resultCode": 0})

    async def broken(self, request: web.Request) -> web.Response:
        self._seen(request)
        return web.Response(status=500, text="boom")

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/cloud/json/login", self.login)
        app.router.add_get("/cloud/json/loginByKey", self.login_by_key)
        app.router.add_get("/cloud/json/logout", self.logout)
        app.router.add_get("/cloud/json/passcode", self.passcode)
        app.router.add_put("/cloud/json/newPassword", self.new_password)
        app.router.add_get("/cloud/json/locations/{location_id}/narratives", self.narratives)
        app.router.add_post("/cloud/json/locations/{location_id}/users", self.add_users)
        app.router.add_get("/cloud/json/broken", self.broken)
        return app


@pytest.fixture
async def cloud():
    cloud = FakeCloud()
    server = TestServer(cloud.app())
    await server.start_server()
    cloud.base_url = str(server.make_url("/")).rstrip("/")
    yield cloud
    await server.close()


@pytest.fixture
async def http_session():
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def api_client(cloud, http_session) -> ApiClient:
    return ApiClient(http_session, base_url=cloud.base_url, timeout=5)


# =============================================================================
# ApiClient
# =============================================================================

async def test_request_sends_key_from_provider(cloud, api_client):
    api_client.key_provider = lambda: "key-1"

    await api_client.get("/cloud/json/logout")

    assert cloud.requests[-1]["headers"]["API_KEY"] == "key-1"


async def test_request_without_key(cloud, api_client):
    await api_client.get("/cloud/json/passcode", params={"username": "alice", "brand": None})

    request = cloud.requests[-1]
    assert "API_KEY" not in request["headers"]
    assert request["query"] == {"username": "alice"}


async def test_non_zero_result_code_raises(api_client):
    with pytest.raises(ApiResultError) as exc_info:
        await api_client.get("/cloud/json/login", use_key=False)

    assert exc_info.value.result_code == 2
    assert "Wrong password" in str(exc_info.value)


async def test_http_error_raises_transport_error(api_client):
    with pytest.raises(TransportError) as exc_info:
        await api_client.get("/cloud/json/broken")

    assert exc_info.value.status == 500


async def test_unauthorized_emits_signal(cloud, api_client):
    cloud.revoked.add("old-key")
    seen = []
    api_client.on_unauthorized.connect(seen.append)

    with pytest.raises(UnauthorizedError):
        await api_client.get("/cloud/json/logout", api_key="old-key")

    assert [event.event_type for event in seen] == [AuthEventType.UNAUTHORIZED]
    assert seen[0].reason == "/cloud/json/logout"


async def test_connection_failure_raises_transport_error(http_session):
    client = ApiClient(http_session, base_url="http://127.0.0.1:1", timeout=2)

    with pytest.raises(TransportError):
        await client.get("/cloud/json/login")


def test_url_normalizes_params():
    client = ApiClient(session=None, base_url="https://api.example.test/")

    url = client.url("/cloud/json/x", {"approve": False, "state": None, "locationId": 5})

    assert url == "https://api.example.test/cloud/json/x?approve=false&locationId=5"


# =============================================================================
# API wrappers
# =============================================================================

async def test_login_sends_password_header(cloud, api_client):
    api = AppApi(api_client)

    result = await api.auth.login("alice", password="secret", key_type=KeyType.ADMIN)

    assert result.key == "key-1"
    request = cloud.requests[-1]
    assert request["headers"]["PASSWORD"] == "secret"
    assert request["query"] == {"username": "alice", "keyType": "11"}


async def test_get_narratives(cloud, api_client):
    api_client.key_provider = lambda: "key-1"
    api = AppApi(api_client)

    response = await api.locations.get_narratives(42, row_count=10, page_marker="m1")

    assert response.next_marker == "marker-2"
    assert [n.id for n in response.narratives] == [1, 2]
    assert response.narratives[0].location_id == 42
    assert response.narratives[0].target == {"deviceId": "door-1"}
    assert response.narratives[1].narrative_type == NarrativeType.USER_DELETED
    assert response.narratives[1].user.user_name == "bob"
    assert cloud.requests[-1]["query"] == {"rowCount": "10", "pageMarker": "m1"}


async def test_add_location_users_sends_camel_case_body(cloud, api_client):
    api_client.key_provider = lambda: "key-1"
    api = AppApi(api_client)
    users = LocationUsersModel(users=[
        LocationUser(id=5, location_access=LocationAccessLevel.CONTROL, category=1, temporary=True),
    ])

    response = await api.locations.add_location_users(42, users)

    assert response.ok
    assert cloud.requests[-1]["body"] == {
        "users": [{"id": 5, "locationAccess": 20, "temporary": True, "category": 1}],
    }


async def test_new_password_by_temp_key_uses_temp_key(cloud, api_client):
    api_client.key_provider = lambda: "session-key"
    api = AppApi(api_client)

    await api.user_accounts.new_password_by_temp_key("new-secret", "temp-key", brand="acme")

    request = cloud.requests[-1]
    assert request["headers"]["API_KEY"] == "temp-key"
    assert request["headers"]["PASSWORD"] == "new-secret"
    assert request["query"] == {"brand": "acme"}


async def test_transport_wraps_failures_as_auth_error(api_client):
    transport = HttpCredentialTransport(AppApi(api_client))

    with pytest.raises(AuthError) as exc_info:
        await transport.login_by_password("alice", "wrong")

    assert exc_info.value.result_code == 2


def test_transport_authorization_url():
    transport = HttpCredentialTransport(AppApi(ApiClient(session=None, base_url="https://api.example.test")))

    url = transport.get_authorization_url(
        False,
        client_id="app",
        response_type="code",
        api_key="temp",
        location_id=9,
    )

    assert url == (
        "https://api.example.test/cloud/json/oauth/authorize"
        "?client_id=app&response_type=code&API_KEY=temp&approve=false&locationId=9"
    )


# =============================================================================
# Wired client
# =============================================================================

async def test_client_login_and_authenticated_requests(cloud, http_session):
    store = InMemoryKeyValueStore()
    client = IotAppsClient(http_session, store, ClientSettings(api_url=cloud.base_url))
    await client.start()
    try:
        await client.auth.login("alice", "secret")
        response = await client.api.locations.get_narratives(7)

        assert len(response.narratives) == 2
        assert cloud.requests[-1]["headers"]["API_KEY"] == "key-1"
        assert store.snapshot()["Auth-Key"] == "key-1"

        await client.auth.logout_global()
        assert cloud.requests[-1]["path"] == "/cloud/json/logout"
        assert not client.auth.is_authenticated()
    finally:
        await client.close()


async def test_client_revoked_key_triggers_relogin(cloud, http_session):
    client = IotAppsClient(http_session, InMemoryKeyValueStore(), ClientSettings(api_url=cloud.base_url))
    await client.start()
    recorder = EventRecorder(client.auth)
    try:
        await client.auth.login("alice", "secret")
        cloud.revoked.add("key-1")

        with pytest.raises(UnauthorizedError):
            await client.api.locations.get_narratives(7)
        await wait_for(lambda: not client.auth.is_authenticated())

        assert recorder.reasons("need_relogin") == ["unauthorized"]
    finally:
        await client.close()


async def test_client_restores_session_from_store(cloud, http_session):
    store = InMemoryKeyValueStore({
        "Auth-Key": "key-1",
        "Auth-KeyExpire": expire_in(timedelta(hours=1)),
    })
    client = IotAppsClient(http_session, store, ClientSettings(api_url=cloud.base_url))
    await client.start()
    try:
        assert client.auth.is_authenticated()
        await client.api.locations.get_narratives(7)
        assert cloud.requests[-1]["headers"]["API_KEY"] == "key-1"
    finally:
        await client.close()


async def test_create_closes_resources_when_start_fails(tmp_path, monkeypatch):
    sessions = []
    real_session = aiohttp.ClientSession

    def tracking_session(*args, **kwargs):
        session = real_session(*args, **kwargs)
        sessions.append(session)
        return session

    monkeypatch.setattr(aiohttp, "ClientSession", tracking_session)
    # No table: reading the persisted key fails in start()
    settings = ClientSettings(storage=StorageSettings(
        backend=StorageBackend.SQLITE,
        database_url=f"sqlite:///{tmp_path / 'keys.db'}",
        create_tables=False,
    ))

    with pytest.raises(StorageError):
        await IotAppsClient.create(settings)

    assert len(sessions) == 1
    assert sessions[0].closed
