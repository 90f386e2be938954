"""
Member Schemas - Request/Response models for the member registry
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from credensuite.models.member import Designation, BloodGroup
from credensuite.schemas.common import CamelModel, blank_to_none


class MemberStatusFilter(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


REQUIRED_MEMBER_FIELDS = ("full_name", "designation", "joining_date", "contact_number")


class MemberCreate(CamelModel):
    """Schema for registering a new member. The member ID is always server-issued."""
    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(..., min_length=1, max_length=255)
    designation: Designation
    joining_date: date
    contact_number: str = Field(..., min_length=1, max_length=32)
    blood_group: Optional[BloodGroup] = None
    emergency_contact_name: Optional[str] = Field(None, max_length=255)
    emergency_contact_number: Optional[str] = Field(None, max_length=32)
    photo_url: Optional[str] = None
    is_active: bool = True

    @field_validator(
        "blood_group", "emergency_contact_name", "emergency_contact_number", "photo_url",
        mode="before",
    )
    @classmethod
    def empty_optional_is_none(cls, v):
        return blank_to_none(v)


class MemberUpdate(CamelModel):
    """Partial update. Only fields present in the payload are applied."""
    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    designation: Optional[Designation] = None
    joining_date: Optional[date] = None
    contact_number: Optional[str] = Field(None, min_length=1, max_length=32)
    blood_group: Optional[BloodGroup] = None
    emergency_contact_name: Optional[str] = Field(None, max_length=255)
    emergency_contact_number: Optional[str] = Field(None, max_length=32)
    photo_url: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator(*REQUIRED_MEMBER_FIELDS, "is_active", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be cleared")
        return v

    @field_validator(
        "blood_group", "emergency_contact_name", "emergency_contact_number", "photo_url",
        mode="before",
    )
    @classmethod
    def empty_optional_is_none(cls, v):
        return blank_to_none(v)


class MemberResponse(CamelModel):
    """Schema for member response"""
    id: str
    member_id: str
    full_name: str
    designation: str
    joining_date: date
    contact_number: str
    blood_group: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_number: Optional[str] = None
    photo_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


SEARCH_MODE_FIELDS = ("search", "phone", "joining_date", "emergency_name", "emergency_phone")


class MemberFilter(CamelModel):
    """
    Member list filter.

    ``search`` is a free-text match across name, member ID, designation and
    contact number. The other four modes each match a single field. At most one
    mode may be supplied; ``designation`` and ``status`` narrow any mode.
    """
    search: Optional[str] = None
    phone: Optional[str] = None
    joining_date: Optional[date] = None
    emergency_name: Optional[str] = None
    emergency_phone: Optional[str] = None
    designation: Optional[Designation] = None
    status: Optional[MemberStatusFilter] = None

    @field_validator(*SEARCH_MODE_FIELDS, "designation", "status", mode="before")
    @classmethod
    def empty_is_none(cls, v):
        return blank_to_none(v)

    @model_validator(mode="after")
    def single_search_mode(self):
        supplied = [to_camel(name) for name in SEARCH_MODE_FIELDS if getattr(self, name) is not None]
        if len(supplied) > 1:
            raise ValueError(f"Only one search mode may be used at a time, got: {', '.join(supplied)}")
        return self

    def search_mode(self) -> Optional[Tuple[str, object]]:
        """The (field, value) of the supplied search mode, if any"""
        for name in SEARCH_MODE_FIELDS:
            value = getattr(self, name)
            if value is not None:
                return name, value
        return None
