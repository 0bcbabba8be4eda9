"""Auth and user account response models."""

from pydantic import Field

from iotapps.models.base import ApiResponseBase


class LoginApiResponse(ApiResponseBase):
    """
    Response of the login and loginByKey endpoints.

    loginByKey may omit `key` when the supplied key is still valid long
    enough; the caller keeps using the key it sent.
    """
    key: str | None = Field(
        default=None,
        description="API key to send in the API_KEY header"
    )
    key_expire: str | None = Field(
        default=None,
        description="Expiry of the key, ISO-8601"
    )
    key_expire_ms: int | None = Field(
        default=None,
        description="Expiry of the key, milliseconds since epoch"
    )
    user_id: int | None = Field(
        default=None,
        description="ID of the user the key belongs to"
    )

    @property
    def expires(self) -> str | int | None:
        """Best available expiry value: the ISO string, else epoch ms."""
        if self.key_expire:
            return self.key_expire
        return self.key_expire_ms


class SendPasscodeApiResponse(ApiResponseBase):
    pass


class LogoutApiResponse(ApiResponseBase):
    pass
