from sqlalchemy import Column, String, Boolean, DateTime
import enum

from credensuite.core.database import Base
from credensuite.core.types import GUID, generate_uuid, utcnow


class ColorScheme(str, enum.Enum):
    """Header colors a template can use"""
    BLUE = "blue"
    GREEN = "green"
    RED = "red"
    PURPLE = "purple"
    GRAY = "gray"


class LayoutStyle(str, enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class CardTemplate(Base):
    """Visual preset for ID cards. At most one row is active."""
    __tablename__ = "card_templates"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    color_scheme = Column(String(16), nullable=False, default=ColorScheme.BLUE.value)
    font_style = Column(String(64), nullable=False, default="Inter")
    layout_style = Column(String(16), nullable=False, default=LayoutStyle.HORIZONTAL.value)
    is_active = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<CardTemplate {self.name} active={self.is_active}>"
