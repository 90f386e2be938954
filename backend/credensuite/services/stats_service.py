"""
Dashboard stats - member counts plus card downloads from the activity log
"""

from datetime import datetime, time
from typing import Callable, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.types import utcnow
from credensuite.models.activity_event import ActivityType
from credensuite.models.member import Member
from credensuite.schemas.activity import DashboardStats
from credensuite.services.activity_service import ActivityLog, activity_log


class StatsService:

    def __init__(self, activity: Optional[ActivityLog] = None, clock: Callable[[], datetime] = utcnow):
        self.activity = activity or activity_log
        self.clock = clock

    async def get_dashboard_stats(self, db: AsyncSession) -> DashboardStats:
        total = await db.scalar(select(func.count(Member.id))) or 0
        active = await db.scalar(select(func.count(Member.id)).where(Member.is_active.is_(True))) or 0

        start_of_day = datetime.combine(self.clock().date(), time.min)
        cards_generated = await self.activity.count(db, ActivityType.CARD_DOWNLOADED)
        downloads_today = await self.activity.count(db, ActivityType.CARD_DOWNLOADED, since=start_of_day)

        return DashboardStats(
            total_members=total,
            active_members=active,
            inactive_members=total - active,
            cards_generated=cards_generated,
            downloads_today=downloads_today,
        )


# Singleton instance
stats_service = StatsService()
