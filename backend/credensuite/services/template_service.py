"""
Card Template Service - CRUD plus single active template activation
"""

from enum import Enum
from typing import List, Optional

from sqlalchemy import case, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.exceptions import StorageUnavailableError, TemplateNotFoundError
from credensuite.core.logging_config import get_logger
from credensuite.core.types import utcnow
from credensuite.models.activity_event import ActivityType
from credensuite.models.card_template import CardTemplate, ColorScheme, LayoutStyle
from credensuite.schemas.template import CardTemplateCreate, CardTemplateUpdate
from credensuite.services.activity_service import ActivityLog, activity_log

logger = get_logger(__name__)

DEFAULT_TEMPLATE = {
    "name": "Blue Professional",
    "color_scheme": ColorScheme.BLUE.value,
    "font_style": "Inter",
    "layout_style": LayoutStyle.HORIZONTAL.value,
}


def _plain(value):
    return value.value if isinstance(value, Enum) else value


class TemplateService:
    """Service for card templates. At most one template is active."""

    def __init__(self, activity: Optional[ActivityLog] = None):
        self.activity = activity or activity_log

    async def list_templates(self, db: AsyncSession) -> List[CardTemplate]:
        result = await db.execute(select(CardTemplate).order_by(CardTemplate.created_at))
        return list(result.scalars().all())

    async def get_template(self, db: AsyncSession, template_id: str) -> CardTemplate:
        template = await db.get(CardTemplate, template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    async def get_active_template(self, db: AsyncSession) -> Optional[CardTemplate]:
        return await db.scalar(select(CardTemplate).where(CardTemplate.is_active.is_(True)).limit(1))

    async def create_template(
        self,
        db: AsyncSession,
        data: CardTemplateCreate,
        actor: Optional[str] = None,
    ) -> CardTemplate:
        template = CardTemplate(
            name=data.name,
            color_scheme=_plain(data.color_scheme),
            font_style=_plain(data.font_style),
            layout_style=_plain(data.layout_style),
            is_active=False,
        )
        db.add(template)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not save template", operation="create_template") from e
        await db.refresh(template)
        logger.info(f"Created card template '{template.name}'")

        if data.is_active:
            template = await self.set_active(db, template.id, actor=actor)
        return template

    async def update_template(
        self,
        db: AsyncSession,
        template_id: str,
        data: CardTemplateUpdate,
    ) -> CardTemplate:
        template = await self.get_template(db, template_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(template, field, _plain(value))
        template.updated_at = utcnow()
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not update template", operation="update_template") from e
        await db.refresh(template)
        return template

    async def set_active(
        self,
        db: AsyncSession,
        template_id: str,
        actor: Optional[str] = None,
    ) -> CardTemplate:
        """
        Make ``template_id`` the only active template.

        One UPDATE sets ``is_active = (id = template_id)`` on every row, so two
        concurrent activations can never leave two templates active.
        """
        template = await self.get_template(db, template_id)
        is_target = CardTemplate.id == template_id
        try:
            await db.execute(
                update(CardTemplate)
                .values(
                    is_active=is_target,
                    updated_at=case((is_target, utcnow()), else_=CardTemplate.updated_at),
                )
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not activate template", operation="set_active") from e

        await db.refresh(template)
        logger.info(f"Active card template is now '{template.name}'")
        await self.activity.record(
            ActivityType.TEMPLATE_ACTIVATED,
            actor=actor,
            subject_id=template.id,
            subject_name=template.name,
        )
        return template

    async def delete_template(self, db: AsyncSession, template_id: str) -> None:
        template = await self.get_template(db, template_id)
        try:
            await db.delete(template)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not delete template", operation="delete_template") from e
        logger.info(f"Deleted card template '{template.name}'")

    async def ensure_default_template(self, db: AsyncSession) -> None:
        """Seed the default active template when no template exists yet"""
        existing = await db.scalar(select(CardTemplate.id).limit(1))
        if existing is not None:
            return
        db.add(CardTemplate(**DEFAULT_TEMPLATE, is_active=True))
        await db.commit()
        logger.info(f"Seeded default card template '{DEFAULT_TEMPLATE['name']}'")


# Singleton instance
template_service = TemplateService()
