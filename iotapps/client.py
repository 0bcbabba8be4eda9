"""
IoT Apps Client

Composition root: wires the aiohttp session, API wrappers, key store and
SessionManager together and owns their lifetime.

Usage:
    async with await IotAppsClient.create(settings_from_env()) as client:
        await client.auth.login("user@example.com", "secret")
        narratives = await client.api.locations.get_narratives(location_id)
"""

import logging

import aiohttp

from iotapps.api import ApiClient, AppApi, HttpCredentialTransport
from iotapps.auth import CredentialTransport, SessionManager
from iotapps.config import ClientSettings, settings_from_env
from iotapps.storage import KeyValueStore, create_store

logger = logging.getLogger(__name__)


class IotAppsClient:
    """
    Top-level SDK object.

    Attributes:
        api: Per-area REST wrappers (auth, user_accounts, oauth_host, locations)
        auth: SessionManager holding the API key
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        store: KeyValueStore,
        settings: ClientSettings | None = None,
        transport: CredentialTransport | None = None,
        owns_http_session: bool = False,
    ):
        """
        Wire components. Call start() before use.

        Args:
            http_session: aiohttp session for all requests
            store: Key-value store for the API key
            settings: Client settings (defaults when None)
            transport: Override the HTTP credential transport
            owns_http_session: Close http_session in close()
        """
        self.settings = settings or ClientSettings()
        self._http_session = http_session
        self._owns_http_session = owns_http_session
        self._store = store

        self.api_client = ApiClient(
            http_session,
            base_url=self.settings.api_url,
            timeout=self.settings.request_timeout,
        )
        self.api = AppApi(self.api_client)
        self.auth = SessionManager(
            transport=transport or HttpCredentialTransport(self.api),
            storage=store,
            refresh_grace=self.settings.refresh_grace,
        )

        self.api_client.key_provider = lambda: self.auth.api_key
        self._unsubscribe_unauthorized = self.api_client.on_unauthorized.connect(
            self.auth.handle_unauthorized
        )

    @classmethod
    async def create(cls, settings: ClientSettings | None = None) -> "IotAppsClient":
        """Build a started client with its own aiohttp session and store."""
        settings = settings or ClientSettings()
        store = await create_store(settings.storage)
        client = cls(
            aiohttp.ClientSession(),
            store,
            settings=settings,
            owns_http_session=True,
        )
        try:
            await client.start()
        except Exception:
            await client.close()
            raise
        return client

    async def start(self) -> None:
        await self.auth.start()
        logger.info(
            f"Client started (api: {self.settings.api_url}, "
            f"authenticated: {self.auth.is_authenticated()})"
        )

    async def close(self) -> None:
        self._unsubscribe_unauthorized()
        await self.auth.stop()
        await self._store.close()
        if self._owns_http_session:
            await self._http_session.close()
        logger.info("Client closed")

    async def __aenter__(self) -> "IotAppsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def create_client_from_env() -> IotAppsClient:
    """Create a started client configured from environment variables."""
    return await IotAppsClient.create(settings_from_env())
