"""
Wallet repository.

Data access for user balances.
"""

from datetime import UTC, datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.wallet import Wallet
from goldsave.repositories.base import BaseRepository


class WalletRepository(BaseRepository[Wallet]):
    """Repository for Wallet entity."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Wallet, session)

    async def credit_referral(self, user_id: int, amount: Decimal) -> None:
        """
        Add a referral commission to a user's wallet.

        Uses an atomic SQL increment so concurrent credits to the same
        wallet never lose an update. A missing wallet is created.

        Args:
            user_id: Recipient user ID
            amount: Amount to credit
        """
        if await self._increment(user_id, amount):
            return

        try:
            async with self.session.begin_nested():
                self.session.add(
                    Wallet(
                        user_id=user_id,
                        referral_balance=amount,
                        total_balance=amount,
                    )
                )
        except IntegrityError:
            # Created concurrently by another transaction
            logger.debug(
                "Wallet appeared concurrently, retrying increment",
                extra={"user_id": user_id},
            )
            if not await self._increment(user_id, amount):
                raise

    async def _increment(self, user_id: int, amount: Decimal) -> bool:
        stmt = (
            update(Wallet)
            .where(Wallet.user_id == user_id)
            .values(
                referral_balance=Wallet.referral_balance + amount,
                total_balance=Wallet.total_balance + amount,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
