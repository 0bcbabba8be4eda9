"""
Error Taxonomy

Exceptions raised by the SDK.

Hierarchy:
- IotAppsError: base for everything raised by this package
  - ValidationError: request rejected locally, no network call made
  - TransportError: network or API failure
    - ApiResultError: server answered with a non-zero resultCode
    - AuthError: a credential operation failed
      - UnauthorizedError: server answered HTTP 401
  - ExpiryError: key considered expired by the local clock (internal)
"""


class IotAppsError(Exception):
    """Base exception for SDK errors."""
    pass


class ValidationError(IotAppsError):
    """Invalid input detected before any request was sent."""
    pass


class TransportError(IotAppsError):
    """
    Network or API failure.

    Attributes:
        status: HTTP status code, if a response was received
        result_code: Vendor resultCode from the response body, if any
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        result_code: int | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.result_code = result_code


class ApiResultError(TransportError):
    """Response body carried a non-zero resultCode."""
    pass


class AuthError(TransportError):
    """Login, refresh or logout failed."""
    pass


class UnauthorizedError(AuthError):
    """The server rejected the API key (HTTP 401)."""
    pass


class ExpiryError(IotAppsError):
    """The API key is already expired, or its expiry cannot be scheduled."""
    pass
