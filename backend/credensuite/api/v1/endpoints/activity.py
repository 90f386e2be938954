"""
Activity feed and dashboard stats endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.database import get_db
from credensuite.schemas import ActivityEventResponse, DashboardStats
from credensuite.services.activity_service import activity_log
from credensuite.services.stats_service import stats_service

router = APIRouter(tags=["Activity"])


@router.get("/activity", response_model=List[ActivityEventResponse])
async def list_activity(
    limit: Optional[int] = Query(None, description="Number of events, clamped to 1..25"),
    db: AsyncSession = Depends(get_db),
):
    """Most recent administrative events, newest first"""
    return await activity_log.list_recent(db, limit)


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)):
    return await stats_service.get_dashboard_stats(db)
