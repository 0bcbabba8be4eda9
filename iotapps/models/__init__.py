# API Models
# Typed request/response shapes for the cloud REST API

from iotapps.models.base import (
    ApiModel,
    ApiResponseBase,
    KeyType,
    PasscodeType,
)
from iotapps.models.auth import (
    LoginApiResponse,
    SendPasscodeApiResponse,
    LogoutApiResponse,
)
from iotapps.models.locations import (
    NarrativeType,
    LocationAccessLevel,
    Narrative,
    NarrativeUser,
    GetNarrativesApiResponse,
    LocationUser,
    LocationUserSchedule,
    LocationUsersModel,
    AddLocationUsersApiResponse,
)

__all__ = [
    # Base
    "ApiModel",
    "ApiResponseBase",
    "KeyType",
    "PasscodeType",
    # Auth
    "LoginApiResponse",
    "SendPasscodeApiResponse",
    "LogoutApiResponse",
    # Locations
    "NarrativeType",
    "LocationAccessLevel",
    "Narrative",
    "NarrativeUser",
    "GetNarrativesApiResponse",
    "LocationUser",
    "LocationUserSchedule",
    "LocationUsersModel",
    "AddLocationUsersApiResponse",
]
