"""
API Client

Low-level JSON request helper over aiohttp shared by every API wrapper.

Responsibilities:
- Join the base URL and endpoint path
- Attach the API_KEY header (explicit key, or the bound key provider)
- Normalize query parameters (drop None, booleans as "true"/"false")
- Map failures onto the SDK error taxonomy
- Reject responses whose resultCode is non-zero
"""

import asyncio
import logging
from typing import Any, Callable, Mapping
from urllib.parse import urlencode

import aiohttp

from iotapps.errors import ApiResultError, TransportError, UnauthorizedError
from iotapps.events import Signal, create_unauthorized_event

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://app.peoplepowerco.com"
API_KEY_HEADER = "API_KEY"


def _normalize_params(params: Mapping[str, Any] | None) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for name, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            normalized[name] = "true" if value else "false"
        else:
            normalized[name] = str(value)
    return normalized


class ApiClient:
    """
    Shared transport for the REST API wrappers.

    The client never closes the aiohttp session it is given.
    `key_provider` is bound by the composition root so requests carry the
    key currently held by the SessionManager.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            session: aiohttp session used for all requests
            base_url: Server root, without trailing slash
            timeout: Total request timeout in seconds
        """
        self._session = session
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self.key_provider: Callable[[], str | None] = lambda: None

        # Fired when the server rejects the API key
        self.on_unauthorized = Signal("unauthorized")

    def url(self, path: str, params: Mapping[str, Any] | None = None) -> str:
        """Absolute URL for a path, with query string."""
        url = f"{self.base_url}{path}"
        query = _normalize_params(params)
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        headers: Mapping[str, str | None] | None = None,
        api_key: str | None = None,
        use_key: bool = True,
    ) -> dict[str, Any]:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Endpoint path starting with '/'
            params: Query parameters
            json: JSON request body
            headers: Extra headers (None values are dropped)
            api_key: Key for this call, overriding the key provider
            use_key: Send the provider's key when api_key is not given

        Returns:
            Response body as dict

        Raises:
            UnauthorizedError: HTTP 401
            ApiResultError: resultCode != 0
            TransportError: Any other network or HTTP failure
        """
        request_headers = {
            name: value for name, value in (headers or {}).items() if value is not None
        }
        key = api_key if api_key is not None else (self.key_provider() if use_key else None)
        if key:
            request_headers[API_KEY_HEADER] = key

        url = f"{self.base_url}{path}"
        try:
            async with self._session.request(
                method,
                url,
                params=_normalize_params(params),
                json=json,
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                if resp.status == 401:
                    logger.warning(f"{method} {path} rejected with 401")
                    self.on_unauthorized.emit(create_unauthorized_event(path))
                    raise UnauthorizedError(
                        f"{method} {path}: unauthorized",
                        status=resp.status,
                    )
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = None
                if resp.status >= 400:
                    raise TransportError(
                        f"{method} {path}: HTTP {resp.status}",
                        status=resp.status,
                        result_code=data.get("resultCode") if isinstance(data, dict) else None,
                    )
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {path}: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} {path}: timed out") from e

        if not isinstance(data, dict):
            raise TransportError(
                f"{method} {path}: unexpected response body",
                status=resp.status,
            )

        result_code = data.get("resultCode", 0)
        if result_code:
            message = data.get("resultCodeMessage") or data.get("resultCodeDesc") or ""
            raise ApiResultError(
                f"{method} {path}: resultCode {result_code} {message}".rstrip(),
                status=resp.status,
                result_code=result_code,
            )

        logger.debug(f"{method} {path} -> {resp.status}")
        return data

    async def get(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return await self.request("PUT", path, **kwargs)
