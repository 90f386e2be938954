from credensuite.schemas.common import CamelModel, validate_payload
from credensuite.schemas.member import (
    MemberCreate,
    MemberUpdate,
    MemberResponse,
    MemberFilter,
    MemberStatusFilter,
)
from credensuite.schemas.settings import OrganizationSettingsUpdate, OrganizationSettingsResponse
from credensuite.schemas.template import (
    CardTemplateCreate,
    CardTemplateUpdate,
    CardTemplateResponse,
    FontStyle,
)
from credensuite.schemas.activity import ActivityEventResponse, DashboardStats

__all__ = [
    "CamelModel",
    "validate_payload",
    "MemberCreate",
    "MemberUpdate",
    "MemberResponse",
    "MemberFilter",
    "MemberStatusFilter",
    "OrganizationSettingsUpdate",
    "OrganizationSettingsResponse",
    "CardTemplateCreate",
    "CardTemplateUpdate",
    "CardTemplateResponse",
    "FontStyle",
    "ActivityEventResponse",
    "DashboardStats",
]
