"""
GoldRate repository.

Data access for daily gold prices.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.gold_rate import GoldRate
from goldsave.repositories.base import BaseRepository


class GoldRateRepository(BaseRepository[GoldRate]):
    """Repository for GoldRate entity."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(GoldRate, session)

    async def get_latest(self) -> GoldRate | None:
        """Get the prevailing (most recent) gold rate."""
        stmt = (
            select(GoldRate)
            .order_by(GoldRate.rate_date.desc(), GoldRate.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
