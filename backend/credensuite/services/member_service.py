"""
Member Service - the member registry

Handles:
- Registration with a sequenced member ID
- Partial updates and the atomic active/inactive toggle
- Deletion with an audit trail
- Filtered listing (free-text search or one fielded search mode)
"""

from enum import Enum
from typing import Callable, List, Optional

from sqlalchemy import select, update, delete, func, not_, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.exceptions import CredenSuiteError, MemberNotFoundError, StorageUnavailableError
from credensuite.core.logging_config import get_logger
from credensuite.core.types import utcnow
from credensuite.models.activity_event import ActivityType
from credensuite.models.member import Member
from credensuite.schemas.member import MemberCreate, MemberUpdate, MemberFilter, MemberStatusFilter
from credensuite.services.activity_service import ActivityLog, activity_log
from credensuite.services.member_id_sequencer import MemberIdSequencer, member_id_sequencer

logger = get_logger(__name__)


def contains_pattern(term: str) -> str:
    """ILIKE pattern matching ``term`` anywhere, with wildcards escaped"""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _plain(value):
    return value.value if isinstance(value, Enum) else value


class MemberService:
    """Service for the member registry"""

    def __init__(
        self,
        sequencer: Optional[MemberIdSequencer] = None,
        activity: Optional[ActivityLog] = None,
        clock: Callable = utcnow,
    ):
        self.sequencer = sequencer or member_id_sequencer
        self.activity = activity or activity_log
        self.clock = clock

    # ==================== CRUD ====================

    async def create_member(
        self,
        db: AsyncSession,
        data: MemberCreate,
        actor: Optional[str] = None,
    ) -> Member:
        """
        Register a member.

        The member ID is issued inside the same transaction as the insert, so
        a failure at any point leaves neither a member nor a consumed sequence.
        """
        now = self.clock()
        try:
            member_id = await self.sequencer.issue_member_id(db, year=now.year)
            member = Member(
                member_id=member_id,
                full_name=data.full_name,
                designation=_plain(data.designation),
                joining_date=data.joining_date,
                contact_number=data.contact_number,
                blood_group=_plain(data.blood_group),
                emergency_contact_name=data.emergency_contact_name,
                emergency_contact_number=data.emergency_contact_number,
                photo_url=data.photo_url,
                is_active=data.is_active,
                created_at=now,
                updated_at=now,
            )
            db.add(member)
            await db.commit()
        except CredenSuiteError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not save member", operation="create_member") from e

        await db.refresh(member)
        logger.info(f"Registered member {member.member_id} ({member.full_name})")

        await self.activity.record(
            ActivityType.MEMBER_ADDED,
            actor=actor,
            subject_id=member.member_id,
            subject_name=member.full_name,
        )
        return member

    async def get_member(self, db: AsyncSession, member_pk: str) -> Member:
        """Get member by internal ID, raising MemberNotFoundError if missing"""
        result = await db.execute(select(Member).where(Member.id == member_pk))
        member = result.scalar_one_or_none()
        if member is None:
            raise MemberNotFoundError(member_pk)
        return member

    async def update_member(
        self,
        db: AsyncSession,
        member_pk: str,
        data: MemberUpdate,
        actor: Optional[str] = None,
    ) -> Member:
        """Merge the supplied fields. The member ID is never touched."""
        member = await self.get_member(db, member_pk)
        was_active = member.is_active

        update_data = data.model_dump(exclude_unset=True)
        changed = sorted(
            field for field, value in update_data.items()
            if field != "is_active" and getattr(member, field) != _plain(value)
        )
        for field, value in update_data.items():
            setattr(member, field, _plain(value))
        member.updated_at = self.clock()

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not update member", operation="update_member") from e
        await db.refresh(member)

        logger.info(f"Updated member {member.member_id}: {sorted(update_data)}")

        if changed:
            await self.activity.record(
                ActivityType.MEMBER_UPDATED,
                actor=actor,
                subject_id=member.member_id,
                subject_name=member.full_name,
                details={"fields": changed},
            )
        if member.is_active != was_active:
            await self._record_status_change(member, actor)
        return member

    async def toggle_active(
        self,
        db: AsyncSession,
        member_pk: str,
        actor: Optional[str] = None,
    ) -> Member:
        """
        Flip ``is_active`` with one UPDATE keyed on the internal ID.

        Two toggles always return the member to its original state, even when
        they race, because the negation happens inside the database.
        """
        stmt = (
            update(Member)
            .where(Member.id == member_pk)
            .values(is_active=not_(Member.is_active), updated_at=self.clock())
            .returning(Member.id)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            toggled = result.scalar_one_or_none()
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not update member", operation="toggle_active") from e

        if toggled is None:
            raise MemberNotFoundError(member_pk)

        member = await db.get(Member, member_pk, populate_existing=True)
        logger.info(f"Member {member.member_id} is now {'active' if member.is_active else 'inactive'}")

        await self._record_status_change(member, actor)
        return member

    async def delete_member(
        self,
        db: AsyncSession,
        member_pk: str,
        actor: Optional[str] = None,
    ) -> None:
        """Delete a member; the audit event keeps its name and member ID"""
        member = await self.get_member(db, member_pk)
        subject_id, subject_name = member.member_id, member.full_name

        try:
            await db.execute(delete(Member).where(Member.id == member_pk))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageUnavailableError("Could not delete member", operation="delete_member") from e

        logger.info(f"Deleted member {subject_id} ({subject_name})")

        await self.activity.record(
            ActivityType.MEMBER_DELETED,
            actor=actor,
            subject_id=subject_id,
            subject_name=subject_name,
        )

    # ==================== QUERIES ====================

    async def list_members(
        self,
        db: AsyncSession,
        filters: Optional[MemberFilter] = None,
    ) -> List[Member]:
        """Members matching ``filters``, newest first"""
        filters = filters or MemberFilter()
        conditions = []

        mode = filters.search_mode()
        if mode is not None:
            field, value = mode
            if field == "search":
                pattern = contains_pattern(value)
                conditions.append(or_(
                    Member.full_name.ilike(pattern, escape="\\"),
                    Member.member_id.ilike(pattern, escape="\\"),
                    Member.designation.ilike(pattern, escape="\\"),
                    Member.contact_number.ilike(pattern, escape="\\"),
                ))
            elif field == "phone":
                conditions.append(Member.contact_number.ilike(contains_pattern(value), escape="\\"))
            elif field == "joining_date":
                conditions.append(Member.joining_date == value)
            elif field == "emergency_name":
                conditions.append(Member.emergency_contact_name.ilike(contains_pattern(value), escape="\\"))
            elif field == "emergency_phone":
                conditions.append(Member.emergency_contact_number.ilike(contains_pattern(value), escape="\\"))

        if filters.designation is not None:
            conditions.append(Member.designation == filters.designation.value)
        if filters.status is not None:
            conditions.append(Member.is_active == (filters.status == MemberStatusFilter.ACTIVE))

        query = select(Member)
        if conditions:
            query = query.where(and_(*conditions))
        # Longer sequence numbers are later: ORG-2024-1000 sorts above ORG-2024-999
        query = query.order_by(
            Member.created_at.desc(),
            func.length(Member.member_id).desc(),
            Member.member_id.desc(),
        )

        result = await db.execute(query)
        return list(result.scalars().all())

    # ==================== HELPERS ====================

    async def _record_status_change(self, member: Member, actor: Optional[str]) -> None:
        await self.activity.record(
            ActivityType.MEMBER_ACTIVATED if member.is_active else ActivityType.MEMBER_DEACTIVATED,
            actor=actor,
            subject_id=member.member_id,
            subject_name=member.full_name,
        )


# Singleton instance
member_service = MemberService()
