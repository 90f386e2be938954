from sqlalchemy import Column, String, Boolean, Date, DateTime, Text
import enum

from credensuite.core.database import Base
from credensuite.core.types import GUID, generate_uuid, utcnow


class Designation(str, enum.Enum):
    """Member roles printed on the badge"""
    VOLUNTEER = "volunteer"
    COORDINATOR = "coordinator"
    MANAGER = "manager"
    EXECUTIVE = "executive"


class BloodGroup(str, enum.Enum):
    """Blood groups accepted on the member form"""
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class Member(Base):
    """Registered member of the organization"""
    __tablename__ = "members"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    # Human readable identifier, e.g. ORG-2024-001. Issued once by the sequencer.
    member_id = Column(String(32), unique=True, nullable=False, index=True)

    # Required profile
    full_name = Column(String(255), nullable=False)
    designation = Column(String(32), nullable=False, index=True)  # Designation value
    joining_date = Column(Date, nullable=False)
    contact_number = Column(String(32), nullable=False)

    # Optional profile
    blood_group = Column(String(4), nullable=True)
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact_number = Column(String(32), nullable=True)
    photo_url = Column(Text, nullable=True)  # '/uploads/<name>' or http(s) URL

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Member {self.member_id} {self.full_name}>"
