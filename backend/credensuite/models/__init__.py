# Re-export all models for convenient imports
from credensuite.models.member import Member, Designation, BloodGroup
from credensuite.models.year_counter import YearCounter
from credensuite.models.organization_settings import OrganizationSettings
from credensuite.models.card_template import CardTemplate, ColorScheme, LayoutStyle
from credensuite.models.activity_event import ActivityEvent, ActivityType

__all__ = [
    # Members
    "Member",
    "Designation",
    "BloodGroup",
    "YearCounter",
    # Organization
    "OrganizationSettings",
    "CardTemplate",
    "ColorScheme",
    "LayoutStyle",
    # Activity
    "ActivityEvent",
    "ActivityType",
]
