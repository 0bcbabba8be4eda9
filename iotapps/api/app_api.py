"""
App API

Aggregate of the per-area API wrappers sharing one ApiClient.
"""

from iotapps.api.client import ApiClient
from iotapps.api.auth_api import AuthApi
from iotapps.api.locations_api import LocationsApi
from iotapps.api.oauth_host_api import OAuthHostApi
from iotapps.api.user_accounts_api import UserAccountsApi


class AppApi:
    """
    Container for API sub-clients.
    Uses Composition pattern to expose specialized APIs.
    """

    def __init__(self, client: ApiClient):
        self.client = client
        self.auth = AuthApi(client)
        self.user_accounts = UserAccountsApi(client)
        self.oauth_host = OAuthHostApi(client)
        self.locations = LocationsApi(client)
