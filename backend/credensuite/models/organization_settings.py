from sqlalchemy import Column, String, DateTime, Text

from credensuite.core.database import Base
from credensuite.core.types import GUID, generate_uuid, utcnow

SINGLETON_KEY = "organization"


class OrganizationSettings(Base):
    """Singleton organization profile used on every badge"""
    __tablename__ = "organization_settings"

    id = Column(GUID, primary_key=True, default=generate_uuid)

    # Fixed value with a unique index, so at most one row can ever exist
    singleton_key = Column(String(16), unique=True, nullable=False, default=SINGLETON_KEY)

    # Required
    organization_name = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=False)

    # Optional contact details
    email_address = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    website = Column(String(255), nullable=True)

    # Asset references ('/uploads/<name>' or http(s) URL)
    logo_url = Column(Text, nullable=True)
    signature_url = Column(Text, nullable=True)

    # Verification URL pattern, '{id}' is replaced with the member ID
    qr_code_pattern = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<OrganizationSettings {self.organization_name}>"
