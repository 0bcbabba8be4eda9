# REST API Layer
# aiohttp-based wrappers for the cloud REST API

from iotapps.api.client import ApiClient, DEFAULT_API_URL
from iotapps.api.auth_api import AuthApi
from iotapps.api.user_accounts_api import UserAccountsApi
from iotapps.api.oauth_host_api import OAuthHostApi
from iotapps.api.locations_api import LocationsApi
from iotapps.api.app_api import AppApi
from iotapps.api.transport import HttpCredentialTransport

__all__ = [
    "ApiClient",
    "DEFAULT_API_URL",
    "AuthApi",
    "UserAccountsApi",
    "OAuthHostApi",
    "LocationsApi",
    "AppApi",
    "HttpCredentialTransport",
]
