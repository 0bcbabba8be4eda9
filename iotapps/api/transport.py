"""
HTTP Credential Transport

CredentialTransport adapter over the REST API wrappers.
Every TransportError raised by the wrappers is re-raised as AuthError,
keeping HTTP status and resultCode.
"""

import logging
from typing import Awaitable, TypeVar

from iotapps.api.app_api import AppApi
from iotapps.auth.ports import CredentialTransport
from iotapps.errors import AuthError, TransportError
from iotapps.models import (
    ApiResponseBase,
    KeyType,
    LoginApiResponse,
    LogoutApiResponse,
    PasscodeType,
    SendPasscodeApiResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _as_auth_error(operation: str, call: Awaitable[T]) -> T:
    try:
        return await call
    except AuthError:
        raise
    except TransportError as e:
        logger.debug(f"{operation} failed: {e}")
        raise AuthError(str(e), status=e.status, result_code=e.result_code) from e


class HttpCredentialTransport(CredentialTransport):
    def __init__(self, api: AppApi):
        self._api = api

    async def login_by_password(
        self,
        username: str,
        password: str,
        key_type: KeyType | None = None,
    ) -> LoginApiResponse:
        return await _as_auth_error(
            "login",
            self._api.auth.login(username, password=password, key_type=key_type),
        )

    async def login_by_passcode(
        self,
        username: str,
        passcode: str,
        key_type: KeyType = KeyType.USER,
    ) -> LoginApiResponse:
        return await _as_auth_error(
            "login by passcode",
            self._api.auth.login(username, passcode=passcode, key_type=key_type),
        )

    async def login_by_key(
        self,
        api_key: str | None = None,
        key_type: KeyType | None = None,
    ) -> LoginApiResponse:
        return await _as_auth_error(
            "login by key",
            self._api.auth.login_by_key(api_key=api_key, key_type=key_type),
        )

    async def send_passcode(
        self,
        username: str,
        passcode_type: PasscodeType = PasscodeType.SMS,
        key_type: KeyType = KeyType.USER,
        brand: str | None = None,
    ) -> SendPasscodeApiResponse:
        return await _as_auth_error(
            "send passcode",
            self._api.auth.send_passcode(
                username,
                passcode_type=passcode_type,
                key_type=key_type,
                brand=brand,
            ),
        )

    async def logout(self) -> LogoutApiResponse:
        return await _as_auth_error("logout", self._api.auth.logout())

    async def set_new_password(
        self,
        new_password: str,
        old_password: str,
        passcode: str | None = None,
        brand: str | None = None,
        app_name: str | None = None,
    ) -> ApiResponseBase:
        return await _as_auth_error(
            "new password",
            self._api.user_accounts.new_password(
                new_password,
                old_password,
                passcode=passcode,
                brand=brand,
                app_name=app_name,
            ),
        )

    async def set_new_password_by_temp_key(
        self,
        new_password: str,
        temp_key: str,
        brand: str | None = None,
        app_name: str | None = None,
        passcode: str | None = None,
    ) -> ApiResponseBase:
        return await _as_auth_error(
            "new password by temp key",
            self._api.user_accounts.new_password_by_temp_key(
                new_password,
                temp_key,
                brand=brand,
                app_name=app_name,
                passcode=passcode,
            ),
        )

    def get_authorization_url(
        self,
        approved: bool,
        client_id: str,
        response_type: str,
        api_key: str,
        state: str | None = None,
        location_id: int | None = None,
        brand: str | None = None,
    ) -> str:
        return self._api.oauth_host.get_url_to_approve_or_deny_authorization(
            approved,
            client_id=client_id,
            response_type=response_type,
            api_key=api_key,
            state=state,
            location_id=location_id,
            brand=brand,
        )
