"""
Subscription repository.

Data access for subscriptions and their plans.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from goldsave.models.subscription import Subscription
from goldsave.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for Subscription entity."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Subscription, session)

    async def get_with_plan(
        self, subscription_id: int
    ) -> Subscription | None:
        """
        Get subscription with its plan eagerly loaded.

        Args:
            subscription_id: Subscription ID

        Returns:
            Subscription or None if not found
        """
        stmt = (
            select(Subscription)
            .options(selectinload(Subscription.plan))
            .where(Subscription.id == subscription_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
