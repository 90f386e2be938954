"""
Card Template Schemas
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from credensuite.models.card_template import ColorScheme, LayoutStyle
from credensuite.schemas.common import CamelModel


class FontStyle(str, Enum):
    INTER = "Inter"
    ROBOTO = "Roboto"
    OPEN_SANS = "Open Sans"
    LATO = "Lato"
    MONTSERRAT = "Montserrat"


class CardTemplateCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    color_scheme: ColorScheme = ColorScheme.BLUE
    font_style: FontStyle = FontStyle.INTER
    layout_style: LayoutStyle = LayoutStyle.HORIZONTAL
    is_active: bool = False


class CardTemplateUpdate(CamelModel):
    """Activation goes through the activate operation, not through update"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color_scheme: Optional[ColorScheme] = None
    font_style: Optional[FontStyle] = None
    layout_style: Optional[LayoutStyle] = None

    @field_validator("name", "color_scheme", "font_style", "layout_style", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be cleared")
        return v


class CardTemplateResponse(CamelModel):
    id: str
    name: str
    color_scheme: str
    font_style: str
    layout_style: str
    is_active: bool
    created_at: datetime
