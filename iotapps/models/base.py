"""
Base API Models

Every response from the cloud API carries a resultCode. Field names on the
wire are camelCase; Python attributes are snake_case. Unknown fields are kept
so newer server versions do not break parsing.
"""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KeyType(IntEnum):
    """API key types accepted by the login endpoints."""
    USER = 0
    TEMPORARY = 1
    ADMIN = 11


class PasscodeType(IntEnum):
    """Delivery channel for one-time passcodes."""
    EMAIL = 1
    SMS = 2


class ApiModel(BaseModel):
    """Base class for wire models."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_payload(self) -> dict:
        """Serialize for request bodies."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ApiResponseBase(ApiModel):
    """Fields common to every API response."""
    result_code: int = Field(
        default=0,
        description="0 on success, vendor error code otherwise"
    )
    result_code_message: str | None = Field(
        default=None,
        description="Human readable error message"
    )
    result_code_desc: str | None = Field(
        default=None,
        description="Short error description"
    )

    @property
    def ok(self) -> bool:
        return self.result_code == 0
