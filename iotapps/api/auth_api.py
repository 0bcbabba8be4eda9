"""
Auth API

Wrappers for the login, loginByKey, logout and passcode endpoints.
See http://docs.iotapps.apiary.io/#reference/login-and-logout
"""

from iotapps.api.client import ApiClient
from iotapps.models import (
    KeyType,
    LoginApiResponse,
    LogoutApiResponse,
    PasscodeType,
    SendPasscodeApiResponse,
)


class AuthApi:
    def __init__(self, client: ApiClient):
        self._client = client

    async def login(
        self,
        username: str,
        password: str | None = None,
        passcode: str | None = None,
        key_type: KeyType | None = None,
        expiry: int | None = None,
    ) -> LoginApiResponse:
        """
        Log in with a password or a one-time passcode.

        Args:
            username: Account username
            password: Account password (sent as a header, never in the URL)
            passcode: SMS passcode used instead of the password
            key_type: Requested key type
            expiry: Requested key lifetime in days
        """
        data = await self._client.get(
            "/cloud/json/login",
            params={
                "username": username,
                "keyType": int(key_type) if key_type is not None else None,
                "expiry": expiry,
            },
            headers={"PASSWORD": password, "PASSCODE": passcode},
            use_key=False,
        )
        return LoginApiResponse.model_validate(data)

    async def login_by_key(
        self,
        api_key: str | None = None,
        key_type: KeyType | None = None,
        expiry: int | None = None,
    ) -> LoginApiResponse:
        """
        Log in with an existing key, or request a temporary key.

        When api_key is None the key currently held by the client is sent.
        """
        data = await self._client.get(
            "/cloud/json/loginByKey",
            params={
                "keyType": int(key_type) if key_type is not None else None,
                "expiry": expiry,
            },
            api_key=api_key,
        )
        return LoginApiResponse.model_validate(data)

    async def logout(self) -> LogoutApiResponse:
        data = await self._client.get("/cloud/json/logout")
        return LogoutApiResponse.model_validate(data)

    async def send_passcode(
        self,
        username: str,
        passcode_type: PasscodeType = PasscodeType.SMS,
        key_type: KeyType = KeyType.USER,
        brand: str | None = None,
        app_name: str | None = None,
    ) -> SendPasscodeApiResponse:
        data = await self._client.get(
            "/cloud/json/passcode",
            params={
                "username": username,
                "type": int(passcode_type),
                "keyType": int(key_type),
                "brand": brand,
                "appName": app_name,
            },
            use_key=False,
        )
        return SendPasscodeApiResponse.model_validate(data)
