"""
Ledger repository.

Data access for referral commission ledger entries.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.ledger_entry import LedgerEntry
from goldsave.repositories.base import BaseRepository


class LedgerRepository(BaseRepository[LedgerEntry]):
    """Repository for LedgerEntry entity."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(LedgerEntry, session)

    async def get_by_job(self, job_id: int) -> list[LedgerEntry]:
        """Get entries produced by a job, ordered by level."""
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.job_id == job_id)
            .order_by(LedgerEntry.level.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_total_for_user(self, user_id: int) -> Decimal:
        """
        Get total commission credited to a user.

        Args:
            user_id: Recipient user ID

        Returns:
            Sum of ledger amounts
        """
        stmt = select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
            LedgerEntry.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))
