"""
Card template endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.database import get_db
from credensuite.modules.auth.dependencies import get_current_actor
from credensuite.schemas import (
    CardTemplateCreate,
    CardTemplateUpdate,
    CardTemplateResponse,
)
from credensuite.services.template_service import template_service

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.get("", response_model=List[CardTemplateResponse])
async def list_templates(db: AsyncSession = Depends(get_db)):
    return await template_service.list_templates(db)


@router.post("", response_model=CardTemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    data: CardTemplateCreate,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    return await template_service.create_template(db, data, actor=actor)


@router.get("/{template_id}", response_model=CardTemplateResponse)
async def get_template(template_id: str, db: AsyncSession = Depends(get_db)):
    return await template_service.get_template(db, template_id)


@router.patch("/{template_id}", response_model=CardTemplateResponse)
async def update_template(
    template_id: str,
    data: CardTemplateUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await template_service.update_template(db, template_id, data)


@router.patch("/{template_id}/activate", response_model=CardTemplateResponse)
async def activate_template(
    template_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    """Make this the only active template"""
    return await template_service.set_active(db, template_id, actor=actor)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: str, db: AsyncSession = Depends(get_db)):
    await template_service.delete_template(db, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
