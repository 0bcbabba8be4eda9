"""
Location Models

Narratives (the location's activity feed) and location user management.
"""

from enum import IntEnum

from pydantic import Field

from iotapps.models.base import ApiModel, ApiResponseBase


class NarrativeType(IntEnum):
    """Kinds of narrative records."""
    DEFAULT = 0
    USER_DELETED = 1
    LOCATION_DELETED = 2
    LOCATION_REMOVED = 3


class LocationAccessLevel(IntEnum):
    """Access a user has to a location."""
    NONE = 0
    READ = 10
    CONTROL = 20
    ADMIN = 30


class NarrativeEmail(ApiModel):
    email: str | None = None
    verified: bool = False
    status: int | None = None


class NarrativeUser(ApiModel):
    """User block returned for removal narrative types."""
    id: int
    creation_date: str | None = None
    creation_date_ms: int | None = None
    delete_date: str | None = None
    delete_date_ms: int | None = None
    user_name: str | None = None
    alt_username: str | None = None
    password_set: bool = False
    first_name: str | None = None
    last_name: str | None = None
    email: NarrativeEmail | None = None
    phone: str | None = None
    phone_type: int | None = None
    sms_status: int | None = None
    language: str | None = None


class Narrative(ApiModel):
    """A single narrative entry."""
    id: int
    narrative_type: NarrativeType = NarrativeType.DEFAULT
    location_id: int
    organization_id: int | None = None
    narrative_date: str | None = None
    narrative_date_ms: int | None = None
    creation_date: str | None = None
    creation_date_ms: int | None = None
    priority: int | None = None
    status: int | None = None
    icon: str | None = None
    title: str | None = None
    description: str | None = None
    target: dict[str, str] | None = None
    app_instance_id: int | None = Field(
        default=None,
        description="Set when the narrative was posted by a bot"
    )
    user: NarrativeUser | None = Field(
        default=None,
        description="Set for removal narrative types"
    )


class GetNarrativesApiResponse(ApiResponseBase):
    next_marker: str | None = Field(
        default=None,
        description="Pass as page_marker to fetch the next page"
    )
    narratives: list[Narrative] = Field(default_factory=list)


class LocationUserSchedule(ApiModel):
    days_of_week: int | None = None
    start_time: int | None = None
    end_time: int | None = None


class LocationUser(ApiModel):
    id: int
    location_access: LocationAccessLevel
    temporary: bool = False
    category: int
    nickname: str | None = None
    schedules: list[LocationUserSchedule] | None = None


class LocationUsersModel(ApiModel):
    """Request body for adding users to a location."""
    users: list[LocationUser]


class AddLocationUsersApiResponse(ApiResponseBase):
    pass
