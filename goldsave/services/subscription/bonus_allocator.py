"""
Bonus allocator.

Credits the one-time completion bonus of a subscription as a bonus
payment converted into gold at the prevailing rate.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.config.constants import GOLD_MG_QUANTUM, MG_PER_GRAM
from goldsave.models.enums import PaymentStatus, PaymentType
from goldsave.models.payment import Payment
from goldsave.models.plan import Plan
from goldsave.models.subscription import Subscription
from goldsave.repositories.gold_rate_repository import GoldRateRepository
from goldsave.repositories.payment_repository import PaymentRepository
from goldsave.repositories.subscription_repository import (
    SubscriptionRepository,
)
from goldsave.utils.exceptions import BusinessRuleFailure


class BonusOutcome(StrEnum):
    """Result of an allocation attempt."""

    ALLOCATED = "allocated"
    ALREADY_ALLOCATED = "already_allocated"
    NOT_ELIGIBLE = "not_eligible"


@dataclass
class BonusAllocationResult:
    """Result of BonusAllocator.allocate."""

    subscription_id: int
    outcome: BonusOutcome
    payment: Payment | None = None
    reason: str | None = None


def is_eligible(
    subscription: Subscription,
    plan: Plan,
    payments: Iterable[Payment],
) -> bool:
    """
    Check whether a subscription has earned its completion bonus.

    Eligible when completed monthly payments reach the plan length, no
    bonus payment exists yet and the bonus amount is positive.
    """
    payments = list(payments)
    if any(p.is_bonus for p in payments):
        return False
    if (subscription.bonus_amount or Decimal("0")) <= 0:
        return False

    completed = sum(1 for p in payments if p.is_completed and not p.is_bonus)
    return completed >= plan.total_months


def gold_weight_mg(amount: Decimal, rate_per_gram: Decimal) -> Decimal:
    """Convert a rupee amount to milligrams of gold."""
    if rate_per_gram <= 0:
        raise BusinessRuleFailure(f"invalid gold rate: {rate_per_gram}")
    return (amount / rate_per_gram * MG_PER_GRAM).quantize(
        GOLD_MG_QUANTUM, rounding=ROUND_HALF_UP
    )


class BonusAllocator:
    """Allocates completion bonuses, at most once per subscription."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize bonus allocator.

        Args:
            session: Async database session
        """
        self.session = session
        self.subscription_repo = SubscriptionRepository(session)
        self.payment_repo = PaymentRepository(session)
        self.gold_rate_repo = GoldRateRepository(session)

    async def allocate(self, subscription_id: int) -> BonusAllocationResult:
        """
        Allocate the completion bonus if earned.

        Args:
            subscription_id: Subscription ID

        Returns:
            BonusAllocationResult with the outcome

        Raises:
            BusinessRuleFailure: Subscription/plan missing or no gold rate
        """
        subscription = await self.subscription_repo.get_with_plan(
            subscription_id
        )
        if subscription is None or subscription.plan is None:
            raise BusinessRuleFailure(
                f"subscription {subscription_id} or its plan not found"
            )

        payments = await self.payment_repo.get_by_subscription(subscription_id)
        existing = next((p for p in payments if p.is_bonus), None)
        if existing is not None:
            return BonusAllocationResult(
                subscription_id, BonusOutcome.ALREADY_ALLOCATED, existing
            )

        if not is_eligible(subscription, subscription.plan, payments):
            return BonusAllocationResult(
                subscription_id,
                BonusOutcome.NOT_ELIGIBLE,
                reason="plan not completed or no bonus configured",
            )

        rate = await self.gold_rate_repo.get_latest()
        if rate is None:
            raise BusinessRuleFailure("no gold rate available")

        bonus = Payment(
            subscription_id=subscription_id,
            month_number=None,
            amount=subscription.bonus_amount,
            status=PaymentStatus.COMPLETED.value,
            payment_type=PaymentType.BONUS.value,
            gold_rate=rate.rate_per_gram,
            gold_mg=gold_weight_mg(
                subscription.bonus_amount, rate.rate_per_gram
            ),
        )

        try:
            async with self.session.begin_nested():
                self.session.add(bonus)
        except IntegrityError:
            # Lost the race: the unique bonus index already holds a row
            await self.session.rollback()
            logger.info(
                "Bonus allocated concurrently, skipping",
                extra={"subscription_id": subscription_id},
            )
            existing = await self.payment_repo.get_bonus_payment(
                subscription_id
            )
            return BonusAllocationResult(
                subscription_id, BonusOutcome.ALREADY_ALLOCATED, existing
            )

        await self.session.commit()

        logger.info(
            "Completion bonus allocated",
            extra={
                "subscription_id": subscription_id,
                "amount": str(bonus.amount),
                "gold_mg": str(bonus.gold_mg),
            },
        )
        return BonusAllocationResult(
            subscription_id, BonusOutcome.ALLOCATED, bonus
        )
