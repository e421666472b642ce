"""
Payment repository.

Data access for subscription payments.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.enums import PaymentType
from goldsave.models.payment import Payment
from goldsave.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment entity."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Payment, session)

    async def get_by_subscription(
        self, subscription_id: int
    ) -> list[Payment]:
        """
        Get all payments of a subscription.

        Args:
            subscription_id: Subscription ID

        Returns:
            Payments ordered by month then id
        """
        stmt = (
            select(Payment)
            .where(Payment.subscription_id == subscription_id)
            .order_by(Payment.month_number.asc(), Payment.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_bonus_payment(
        self, subscription_id: int
    ) -> Payment | None:
        """Get the bonus payment of a subscription, if allocated."""
        stmt = select(Payment).where(
            Payment.subscription_id == subscription_id,
            Payment.payment_type == PaymentType.BONUS.value,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
