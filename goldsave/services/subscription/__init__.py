"""
Subscription services package.

- payment_state: Month-by-month paid/current/missed tracking
- bonus_allocator: One-time completion bonus
"""

from goldsave.services.subscription.bonus_allocator import (
    BonusAllocationResult,
    BonusAllocator,
    BonusOutcome,
    is_eligible,
)
from goldsave.services.subscription.payment_state import (
    MonthSchedule,
    MonthSlot,
    MonthState,
    MonthStatus,
    PaymentStateTracker,
    build_schedule,
    classify,
    elapsed_index,
    visible_months,
)


__all__ = [
    # Payment state
    "MonthSchedule",
    "MonthSlot",
    "MonthState",
    "MonthStatus",
    "PaymentStateTracker",
    "build_schedule",
    "classify",
    "elapsed_index",
    "visible_months",
    # Bonus
    "BonusAllocationResult",
    "BonusAllocator",
    "BonusOutcome",
    "is_eligible",
]
