"""
Member registry endpoints, including ID card download and preview.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.database import get_db
from credensuite.core.rate_limiter import pdf_rate_limit
from credensuite.models.activity_event import ActivityType
from credensuite.modules.auth.dependencies import get_current_actor
from credensuite.schemas import (
    MemberCreate,
    MemberUpdate,
    MemberResponse,
    MemberFilter,
    validate_payload,
)
from credensuite.services.activity_service import activity_log
from credensuite.services.badge_renderer import badge_renderer
from credensuite.services.badge_template import build_badge_html, prepare_badge_assets
from credensuite.services.member_directory import build_directory_html
from credensuite.services.member_export import members_to_csv
from credensuite.services.member_service import member_service
from credensuite.services.settings_service import settings_service
from credensuite.services.template_service import template_service

router = APIRouter(prefix="/members", tags=["Members"])


async def member_filter(
    search: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    joining_date: Optional[str] = Query(None, alias="joiningDate"),
    emergency_name: Optional[str] = Query(None, alias="emergencyName"),
    emergency_phone: Optional[str] = Query(None, alias="emergencyPhone"),
    designation: Optional[str] = Query(None),
    member_status: Optional[str] = Query(None, alias="status"),
) -> MemberFilter:
    """Collect list filters from the query string, validated all at once"""
    return validate_payload(MemberFilter, {
        "search": search,
        "phone": phone,
        "joiningDate": joining_date,
        "emergencyName": emergency_name,
        "emergencyPhone": emergency_phone,
        "designation": designation,
        "status": member_status,
    })


@router.get("", response_model=List[MemberResponse])
async def list_members(
    filters: MemberFilter = Depends(member_filter),
    db: AsyncSession = Depends(get_db),
):
    """List members, newest first"""
    return await member_service.list_members(db, filters)


@router.get("/export.csv")
async def export_members_csv(
    filters: MemberFilter = Depends(member_filter),
    db: AsyncSession = Depends(get_db),
):
    """Export the filtered member list as CSV"""
    members = await member_service.list_members(db, filters)
    filename = f"members_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.csv"
    return StreamingResponse(
        iter([members_to_csv(members)]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export.pdf")
@pdf_rate_limit()
async def export_members_pdf(
    request: Request,
    filters: MemberFilter = Depends(member_filter),
    db: AsyncSession = Depends(get_db),
):
    """Printable A4 members directory for the filtered list"""
    members = await member_service.list_members(db, filters)
    org_settings = await settings_service.get_settings(db)
    generated_at = datetime.utcnow()

    html = build_directory_html(members, org_settings, filters, generated_at)
    pdf_bytes = await badge_renderer.render_directory_pdf(html, member_count=len(members))

    filename = f"members-directory-{generated_at.date().isoformat()}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    data: MemberCreate,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    """Register a member; the member ID is issued by the server"""
    return await member_service.create_member(db, data, actor=actor)


@router.get("/{member_pk}", response_model=MemberResponse)
async def get_member(member_pk: str, db: AsyncSession = Depends(get_db)):
    return await member_service.get_member(db, member_pk)


@router.patch("/{member_pk}", response_model=MemberResponse)
async def update_member(
    member_pk: str,
    data: MemberUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    return await member_service.update_member(db, member_pk, data, actor=actor)


@router.post("/{member_pk}/toggle-active", response_model=MemberResponse)
async def toggle_member_active(
    member_pk: str,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    return await member_service.toggle_active(db, member_pk, actor=actor)


@router.delete("/{member_pk}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(
    member_pk: str,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    await member_service.delete_member(db, member_pk, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{member_pk}/id-card.pdf")
@pdf_rate_limit()
async def download_id_card(
    request: Request,
    member_pk: str,
    db: AsyncSession = Depends(get_db),
    actor: Optional[str] = Depends(get_current_actor),
):
    """Two-page (front/back) ID card PDF"""
    member = await member_service.get_member(db, member_pk)
    org_settings = await settings_service.get_settings(db)
    template = await template_service.get_active_template(db)

    pdf_bytes = await badge_renderer.render_badge_pdf(member, org_settings, template)

    await activity_log.record(
        ActivityType.CARD_DOWNLOADED,
        actor=actor,
        subject_id=member.member_id,
        subject_name=member.full_name,
    )

    filename = f"id-card-{member.member_id or member.id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{member_pk}/id-card.html", response_class=HTMLResponse)
async def preview_id_card(member_pk: str, db: AsyncSession = Depends(get_db)):
    """The exact HTML the PDF is rendered from"""
    member = await member_service.get_member(db, member_pk)
    org_settings = await settings_service.get_settings(db)
    template = await template_service.get_active_template(db)
    assets = await prepare_badge_assets(member, org_settings)
    return HTMLResponse(build_badge_html(member, org_settings, template, assets))
