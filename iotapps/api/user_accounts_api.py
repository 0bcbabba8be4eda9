"""User account wrappers: password changes."""

from iotapps.api.client import ApiClient
from iotapps.models import ApiResponseBase

NEW_PASSWORD_PATH = "/cloud/json/newPassword"


class UserAccountsApi:
    def __init__(self, client: ApiClient):
        self._client = client

    async def new_password(
        self,
        new_password: str,
        old_password: str,
        passcode: str | None = None,
        brand: str | None = None,
        app_name: str | None = None,
    ) -> ApiResponseBase:
        """
        Change the password of the logged in user.

        With 2-factor auth enabled the first call sends a passcode and returns
        a non-zero resultCode; call again with the passcode.
        """
        data = await self._client.put(
            NEW_PASSWORD_PATH,
            params={"brand": brand, "appName": app_name},
            headers={
                "PASSWORD": new_password,
                "OLD_PASSWORD": old_password,
                "PASSCODE": passcode,
            },
        )
        return ApiResponseBase.model_validate(data)

    async def new_password_by_temp_key(
        self,
        new_password: str,
        temp_key: str,
        brand: str | None = None,
        app_name: str | None = None,
        passcode: str | None = None,
    ) -> ApiResponseBase:
        """Set a new password using a temporary key from a reset email."""
        data = await self._client.put(
            NEW_PASSWORD_PATH,
            params={"brand": brand, "appName": app_name},
            headers={"PASSWORD": new_password, "PASSCODE": passcode},
            api_key=temp_key,
        )
        return ApiResponseBase.model_validate(data)
