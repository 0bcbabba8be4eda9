"""
Credential Transport Port

Abstract base class for the network calls the session manager relies on.

- SessionManager depends only on this interface
- HttpCredentialTransport (iotapps.api.transport) implements it over HTTP
- Tests substitute an in-process fake

Implementations raise AuthError (or a subclass) when a call fails.
"""

from abc import ABC, abstractmethod

from iotapps.models import (
    ApiResponseBase,
    KeyType,
    LoginApiResponse,
    LogoutApiResponse,
    PasscodeType,
    SendPasscodeApiResponse,
)


class CredentialTransport(ABC):
    """Network operations that acquire, exchange and revoke API keys."""

    @abstractmethod
    async def login_by_password(
        self,
        username: str,
        password: str,
        key_type: KeyType | None = None,
    ) -> LoginApiResponse:
        """
        Exchange a username and password for an API key.

        Args:
            username: Account username
            password: Account password
            key_type: Requested key type (server default when None)

        Raises:
            AuthError: If the credentials are rejected or the call fails
        """
        ...

    @abstractmethod
    async def login_by_passcode(
        self,
        username: str,
        passcode: str,
        key_type: KeyType = KeyType.USER,
    ) -> LoginApiResponse:
        """Exchange a username and one-time passcode for an API key."""
        ...

    @abstractmethod
    async def login_by_key(
        self,
        api_key: str | None = None,
        key_type: KeyType | None = None,
    ) -> LoginApiResponse:
        """
        Exchange an existing key for a (possibly new) key.

        Args:
            api_key: Key to exchange; the currently active key when None
            key_type: Requested key type; TEMPORARY yields a short-lived key

        Returns:
            Response whose `key` may be absent if the sent key is kept
        """
        ...

    @abstractmethod
    async def send_passcode(
        self,
        username: str,
        passcode_type: PasscodeType = PasscodeType.SMS,
        key_type: KeyType = KeyType.USER,
        brand: str | None = None,
    ) -> SendPasscodeApiResponse:
        """Ask the server to send a one-time passcode to the user."""
        ...

    @abstractmethod
    async def logout(self) -> LogoutApiResponse:
        """Revoke the active key on the server, for every client."""
        ...

    @abstractmethod
    async def set_new_password(
        self,
        new_password: str,
        old_password: str,
        passcode: str | None = None,
        brand: str | None = None,
        app_name: str | None = None,
    ) -> ApiResponseBase:
        """Change the password of the logged in user."""
        ...

    @abstractmethod
    async def set_new_password_by_temp_key(
        self,
        new_password: str,
        temp_key: str,
        brand: str | None = None,
        app_name: str | None = None,
        passcode: str | None = None,
    ) -> ApiResponseBase:
        """Set a new password authorized by a temporary key (reset flow)."""
        ...

    @abstractmethod
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
        """Build the URL that approves or denies an OAuth authorization request."""
        ...
