"""
Organization Settings Service - the singleton organization profile
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.config import settings as app_settings
from credensuite.core.database import upsert_insert
from credensuite.core.exceptions import StorageUnavailableError
from credensuite.core.logging_config import get_logger
from credensuite.core.types import generate_uuid, utcnow
from credensuite.models.activity_event import ActivityType
from credensuite.models.organization_settings import SINGLETON_KEY, OrganizationSettings
from credensuite.schemas.settings import OrganizationSettingsUpdate
from credensuite.services.activity_service import ActivityLog, activity_log

logger = get_logger(__name__)


def default_settings_values() -> dict:
    """Values used when the organization has never been configured"""
    return {
        "organization_name": app_settings.DEFAULT_ORGANIZATION_NAME,
        "phone_number": app_settings.DEFAULT_ORGANIZATION_PHONE,
        "email_address": app_settings.DEFAULT_ORGANIZATION_EMAIL,
        "address": app_settings.DEFAULT_ORGANIZATION_ADDRESS,
        "website": app_settings.DEFAULT_ORGANIZATION_WEBSITE,
        "qr_code_pattern": app_settings.DEFAULT_QR_CODE_PATTERN,
    }


class SettingsService:
    """Read and merge-update the organization settings row"""

    def __init__(self, activity: Optional[ActivityLog] = None):
        self.activity = activity or activity_log

    async def ensure_default_settings(self, db: AsyncSession) -> OrganizationSettings:
        """
        Return the settings row, creating it from defaults when absent.

        The insert is ``ON CONFLICT (singleton_key) DO NOTHING``, so concurrent
        first reads agree on a single row.
        """
        query = select(OrganizationSettings).where(OrganizationSettings.singleton_key == SINGLETON_KEY)
        existing = await db.scalar(query)
        if existing is not None:
            return existing

        insert = upsert_insert(db)
        if insert is None:
            raise StorageUnavailableError(
                f"Settings seeding is not supported on '{db.get_bind().dialect.name}'",
                operation="ensure_default_settings",
            )

        now = utcnow()
        stmt = (
            insert(OrganizationSettings)
            .values(
                id=generate_uuid(),
                singleton_key=SINGLETON_KEY,
                created_at=now,
                updated_at=now,
                **default_settings_values(),
            )
            .on_conflict_do_nothing(index_elements=[OrganizationSettings.singleton_key])
        )
        try:
            result = await db.execute(stmt)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not create default settings", operation="ensure_default_settings") from e

        row = await db.scalar(query)
        if result.rowcount:
            logger.info(f"Seeded default organization settings for '{row.organization_name}'")
        return row

    async def get_settings(self, db: AsyncSession) -> OrganizationSettings:
        return await self.ensure_default_settings(db)

    async def update_settings(
        self,
        db: AsyncSession,
        data: OrganizationSettingsUpdate,
        actor: Optional[str] = None,
    ) -> OrganizationSettings:
        """Merge provided fields over the stored settings"""
        row = await self.ensure_default_settings(db)

        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(row, field, str(value) if value is not None else None)
        row.updated_at = utcnow()

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not update settings", operation="update_settings") from e
        await db.refresh(row)

        logger.info(f"Organization settings updated: {sorted(update_data)}")
        await self.activity.record(
            ActivityType.SETTINGS_UPDATED,
            actor=actor,
            subject_id=row.id,
            subject_name=row.organization_name,
            details={"fields": sorted(update_data)},
        )
        return row


# Singleton instance
settings_service = SettingsService()
