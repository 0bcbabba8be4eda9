"""OAuth host wrappers (this cloud acting as the authorization server)."""

from iotapps.api.client import ApiClient


class OAuthHostApi:
    def __init__(self, client: ApiClient):
        self._client = client

    def get_url_to_approve_or_deny_authorization(
        self,
        approved: bool,
        client_id: str,
        response_type: str,
        api_key: str,
        state: str | None = None,
        location_id: int | None = None,
        brand: str | None = None,
    ) -> str:
        """
        URL that approves or denies a third-party authorization request.

        The user is redirected to the third-party application afterwards.

        Args:
            approved: Approve (True) or deny (False)
            client_id: OAuth client ID
            response_type: OAuth 2 response type, only "code" is supported
            api_key: Temporary API key
            state: Client state echoed back in the callback URL
            location_id: Location the third-party app gets access to
            brand: Brand name
        """
        return self._client.url(
            "/cloud/json/oauth/authorize",
            params={
                "client_id": client_id,
                "response_type": response_type,
                "API_KEY": api_key,
                "approve": approved,
                "state": state,
                "locationId": location_id,
                "brand": brand,
            },
        )
