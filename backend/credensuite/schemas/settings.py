"""
Organization Settings Schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from credensuite.schemas.common import CamelModel, blank_to_none


class OrganizationSettingsUpdate(CamelModel):
    """Fields present in the payload are merged over the stored settings"""
    organization_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, min_length=1, max_length=32)
    email_address: Optional[EmailStr] = None
    address: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    logo_url: Optional[str] = None
    signature_url: Optional[str] = None
    qr_code_pattern: Optional[str] = Field(None, max_length=500)

    @field_validator("organization_name", "phone_number", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be cleared")
        return v

    @field_validator(
        "email_address", "address", "website", "logo_url", "signature_url", "qr_code_pattern",
        mode="before",
    )
    @classmethod
    def empty_optional_is_none(cls, v):
        return blank_to_none(v)

    @field_validator("qr_code_pattern")
    @classmethod
    def pattern_is_url(cls, v):
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("QR code pattern must be an http(s) URL")
        return v


class OrganizationSettingsResponse(CamelModel):
    id: str
    organization_name: str
    phone_number: str
    email_address: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    signature_url: Optional[str] = None
    qr_code_pattern: Optional[str] = None
    updated_at: datetime
