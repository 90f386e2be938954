from sqlalchemy import Column, String, DateTime, JSON
import enum

from credensuite.core.database import Base
from credensuite.core.types import GUID, generate_uuid, utcnow


class ActivityType(str, enum.Enum):
    """Administrative actions recorded in the activity feed"""
    MEMBER_ADDED = "member_added"
    MEMBER_UPDATED = "member_updated"
    MEMBER_ACTIVATED = "member_activated"
    MEMBER_DEACTIVATED = "member_deactivated"
    MEMBER_DELETED = "member_deleted"
    CARD_DOWNLOADED = "card_downloaded"
    SETTINGS_UPDATED = "settings_updated"
    TEMPLATE_ACTIVATED = "template_activated"


class ActivityEvent(Base):
    """Append-only admin event. Rows are never updated or deleted."""
    __tablename__ = "activity_events"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)
    type = Column(String(32), nullable=False, index=True)  # ActivityType value

    actor = Column(String(255), nullable=True)  # email forwarded by the auth gateway
    subject_id = Column(String(64), nullable=True)
    subject_name = Column(String(255), nullable=True)
    details = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<ActivityEvent {self.type} {self.subject_id}>"
