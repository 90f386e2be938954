"""
Activity Log - append-only feed of administrative actions

Writes are best-effort: they use their own session after the primary
operation has committed, and a failed write is logged, never raised.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.config import settings
from credensuite.core.database import get_session_local
from credensuite.core.logging_config import get_logger
from credensuite.models.activity_event import ActivityEvent, ActivityType

logger = get_logger(__name__)


def clamp_limit(limit: Optional[int]) -> int:
    """Bound a requested feed size to 1..ACTIVITY_FEED_MAX_LIMIT"""
    if limit is None:
        limit = settings.ACTIVITY_FEED_DEFAULT_LIMIT
    return max(1, min(int(limit), settings.ACTIVITY_FEED_MAX_LIMIT))


class ActivityLog:
    """Writer and reader for ActivityEvent rows"""

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> Callable[[], AsyncSession]:
        return self._session_factory or get_session_local()

    async def record(
        self,
        event_type: ActivityType,
        actor: Optional[str] = None,
        subject_id: Optional[str] = None,
        subject_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[ActivityEvent]:
        """
        Append one event.

        Returns the stored event, or None when the write failed.
        """
        try:
            async with self.session_factory() as session:
                event = ActivityEvent(
                    type=ActivityType(event_type).value,
                    actor=actor or None,
                    subject_id=subject_id,
                    subject_name=subject_name,
                    details=details,
                )
                session.add(event)
                await session.commit()
                return event
        except Exception as e:
            logger.warning(
                f"Activity log write failed for {event_type}: {type(e).__name__}: {e}",
                extra={
                    "event_type": "activity_log_failure",
                    "activity_type": str(getattr(event_type, "value", event_type)),
                    "subject_id": subject_id,
                },
            )
            return None

    async def list_recent(self, db: AsyncSession, limit: Optional[int] = None) -> List[ActivityEvent]:
        """Most recent events, newest first"""
        result = await db.execute(
            select(ActivityEvent)
            .order_by(ActivityEvent.timestamp.desc())
            .limit(clamp_limit(limit))
        )
        return list(result.scalars().all())

    async def count(
        self,
        db: AsyncSession,
        event_type: ActivityType,
        since: Optional[datetime] = None,
    ) -> int:
        query = select(func.count(ActivityEvent.id)).where(ActivityEvent.type == event_type.value)
        if since is not None:
            query = query.where(ActivityEvent.timestamp >= since)
        result = await db.execute(query)
        return result.scalar() or 0


# Singleton instance
activity_log = ActivityLog()
