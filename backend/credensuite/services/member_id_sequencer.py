"""
Member ID Sequencer

Issues identifiers of the form ``<PREFIX>-<year>-<seq>`` where ``seq`` is
zero-padded to at least three digits. The per-year counter is advanced with a
single ``INSERT .. ON CONFLICT DO UPDATE .. RETURNING`` statement, so two
concurrent callers can never observe the same value. It runs on the caller's
session so the counter bump and the member insert commit or roll back together.
"""

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from credensuite.core.config import settings
from credensuite.core.database import upsert_insert
from credensuite.core.exceptions import StorageUnavailableError
from credensuite.core.logging_config import get_logger
from credensuite.core.types import utcnow
from credensuite.models.year_counter import YearCounter

logger = get_logger(__name__)


def format_member_id(prefix: str, year: int, seq: int) -> str:
    return f"{prefix}-{year}-{seq:03d}"


class MemberIdSequencer:
    """Atomic per-year counter backed by the ``year_counters`` table"""

    def __init__(self, prefix: Optional[str] = None, clock: Callable[[], datetime] = utcnow):
        self.prefix = prefix or settings.MEMBER_ID_PREFIX
        self.clock = clock

    async def next_seq(self, db: AsyncSession, year: int) -> int:
        """Increment-and-fetch the counter for ``year``. The first call yields 1."""
        insert = upsert_insert(db)
        if insert is None:
            raise StorageUnavailableError(
                f"Atomic member ID sequencing is not supported on '{db.get_bind().dialect.name}'",
                operation="issue_member_id",
            )

        stmt = (
            insert(YearCounter)
            .values(year=year, seq=1)
            .on_conflict_do_update(
                index_elements=[YearCounter.year],
                set_={"seq": YearCounter.seq + 1},
            )
            .returning(YearCounter.seq)
        )
        try:
            result = await db.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Member ID counter update failed for {year}: {e}")
            raise StorageUnavailableError(
                "Could not issue a member ID",
                operation="issue_member_id",
            ) from e

    async def issue_member_id(self, db: AsyncSession, year: Optional[int] = None) -> str:
        """Issue the next member ID for ``year`` (defaults to the current year)"""
        if year is None:
            year = self.clock().year
        seq = await self.next_seq(db, year)
        member_id = format_member_id(self.prefix, year, seq)
        logger.debug(f"Issued member ID {member_id}")
        return member_id


# Singleton instance
member_id_sequencer = MemberIdSequencer()
