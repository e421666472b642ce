"""
Payment-state tracker.

Maps a subscription's calendar months onto plan month numbers and
labels each month paid, current or missed.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum

from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.payment import Payment
from goldsave.repositories.payment_repository import PaymentRepository
from goldsave.repositories.subscription_repository import (
    SubscriptionRepository,
)
from goldsave.utils.exceptions import BusinessRuleFailure


class MonthState(StrEnum):
    """Display state of one plan month."""

    PAID = "paid"
    CURRENT = "current"
    MISSED = "missed"


@dataclass(frozen=True)
class MonthSlot:
    """One month of a plan: number (1-based) and first calendar day."""

    month_number: int
    anchor: date

    @property
    def label(self) -> str:
        return self.anchor.strftime("%b %Y")


@dataclass(frozen=True)
class MonthStatus:
    """A month slot with its computed state."""

    slot: MonthSlot
    state: MonthState

    @property
    def month_number(self) -> int:
        return self.slot.month_number


def _add_months(anchor: date, months: int) -> date:
    index = anchor.year * 12 + (anchor.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


class MonthSchedule:
    """
    Finite schedule of month slots.

    Slots are produced lazily and every iteration starts from month 1,
    so the same schedule can be walked any number of times.
    """

    def __init__(self, start_date: date, total_months: int) -> None:
        if total_months < 0:
            raise ValueError("total_months must be non-negative")
        self.start_date = start_date
        self.total_months = total_months

    def __iter__(self) -> Iterator[MonthSlot]:
        first = self.start_date.replace(day=1)
        for i in range(self.total_months):
            yield MonthSlot(month_number=i + 1, anchor=_add_months(first, i))

    def __len__(self) -> int:
        return self.total_months


def build_schedule(start_date: date, total_months: int) -> MonthSchedule:
    """
    Build the month schedule of a subscription.

    Args:
        start_date: Subscription start date
        total_months: Plan length

    Returns:
        Schedule whose slot i is anchored on the first day of
        (start month + i)
    """
    return MonthSchedule(start_date, total_months)


def elapsed_index(start_date: date, now: date) -> int:
    """
    Get the plan month number that contains a date.

    1 during the start month, 2 the month after, and so on; 0 or less
    before the start month.
    """
    return (
        (now.year - start_date.year) * 12 + (now.month - start_date.month) + 1
    )


def paid_month_numbers(payments: Iterable[Payment]) -> set[int]:
    """Month numbers covered by completed monthly payments."""
    return {
        int(p.month_number)
        for p in payments
        if p.is_completed and not p.is_bonus and p.month_number is not None
    }


def classify(slot: MonthSlot, paid_months: set[int], elapsed: int) -> MonthState:
    """
    Get the state of a month slot.

    Args:
        slot: Month slot
        paid_months: Month numbers with a completed payment
        elapsed: Result of elapsed_index for the current date

    Returns:
        paid if covered, current if it is the elapsed month, else missed
    """
    if slot.month_number in paid_months:
        return MonthState.PAID
    if slot.month_number == elapsed:
        return MonthState.CURRENT
    return MonthState.MISSED


def visible_months(
    schedule: MonthSchedule,
    payments: Iterable[Payment],
    now: date,
) -> list[MonthStatus]:
    """
    Annotate the months a subscriber should see.

    Future months stay hidden unless already paid.

    Args:
        schedule: Subscription schedule
        payments: All payments of the subscription (any status)
        now: Current date

    Returns:
        Month statuses in month order
    """
    paid = paid_month_numbers(payments)
    elapsed = elapsed_index(schedule.start_date, now)

    return [
        MonthStatus(slot=slot, state=classify(slot, paid, elapsed))
        for slot in schedule
        if slot.month_number <= elapsed or slot.month_number in paid
    ]


class PaymentStateTracker:
    """Store-backed month states for a subscription."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize tracker.

        Args:
            session: Async database session
        """
        self.subscription_repo = SubscriptionRepository(session)
        self.payment_repo = PaymentRepository(session)

    async def month_states(
        self, subscription_id: int, today: date | None = None
    ) -> list[MonthStatus]:
        """
        Get visible month states of a subscription.

        Args:
            subscription_id: Subscription ID
            today: Current date (defaults to today in UTC)

        Returns:
            Month statuses in month order

        Raises:
            BusinessRuleFailure: Subscription or plan not found
        """
        subscription = await self.subscription_repo.get_with_plan(
            subscription_id
        )
        if subscription is None or subscription.plan is None:
            raise BusinessRuleFailure(
                f"subscription {subscription_id} or its plan not found"
            )

        payments = await self.payment_repo.get_by_subscription(subscription_id)
        schedule = build_schedule(
            subscription.start_date, subscription.plan.total_months
        )
        return visible_months(
            schedule, payments, today or datetime.now(UTC).date()
        )
