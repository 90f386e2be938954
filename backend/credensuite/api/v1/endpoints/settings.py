"""
Organization settings endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.database import get_db
from credensuite.modules.auth.dependencies import get_current_actor
from credensuite.schemas import OrganizationSettingsUpdate, OrganizationSettingsResponse
from credensuite.services.settings_service import settings_service

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=OrganizationSettingsResponse)
async def get_settings(db: AsyncSession = Depends(get_db)):
    """Organization profile (seeded with defaults on first access)"""
    return await settings_service.get_settings(db)


@router.patch("", response_model=OrganizationSettingsResponse)
async def update_settings(
    data: OrganizationSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    return await settings_service.update_settings(db, data, actor=actor)
