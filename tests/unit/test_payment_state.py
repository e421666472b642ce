"""
Unit tests for month-by-month payment state.

Tests cover:
- Schedule construction (anchors, year rollover, restartability)
- Elapsed month index
- paid/current/missed classification
- Visibility of future months
"""

from datetime import date
from decimal import Decimal

import pytest

from goldsave.models.payment import Payment
from goldsave.services.subscription.payment_state import (
    MonthSlot,
    MonthState,
    build_schedule,
    classify,
    elapsed_index,
    visible_months,
)


def make_payment(month_number, status="completed", payment_type="monthly"):
    """Create a detached payment row."""
    return Payment(
        subscription_id=1,
        month_number=month_number,
        amount=Decimal("1000.00"),
        status=status,
        payment_type=payment_type,
    )


class TestBuildSchedule:
    """Test month schedule construction."""

    def test_anchors_on_first_of_month(self):
        slots = list(build_schedule(date(2026, 3, 17), 3))

        assert [s.month_number for s in slots] == [1, 2, 3]
        assert [s.anchor for s in slots] == [
            date(2026, 3, 1),
            date(2026, 4, 1),
            date(2026, 5, 1),
        ]

    def test_year_rollover(self):
        slots = list(build_schedule(date(2026, 11, 30), 4))

        assert [s.anchor for s in slots] == [
            date(2026, 11, 1),
            date(2026, 12, 1),
            date(2027, 1, 1),
            date(2027, 2, 1),
        ]

    def test_restartable(self):
        schedule = build_schedule(date(2026, 1, 1), 10)

        assert list(schedule) == list(schedule)
        assert len(schedule) == 10

    def test_empty_plan(self):
        assert list(build_schedule(date(2026, 1, 1), 0)) == []

    def test_negative_length_rejected(self):
        with pytest.raises(ValueError):
            build_schedule(date(2026, 1, 1), -1)

    def test_label(self):
        assert MonthSlot(1, date(2026, 10, 1)).label == "Oct 2026"


class TestElapsedIndex:
    """Test plan month containing a date."""

    def test_start_month_is_one(self):
        assert elapsed_index(date(2026, 1, 15), date(2026, 1, 31)) == 1

    def test_day_of_month_ignored(self):
        # Next calendar month counts even if fewer than 30 days passed
        assert elapsed_index(date(2026, 1, 31), date(2026, 2, 1)) == 2

    def test_across_years(self):
        assert elapsed_index(date(2025, 11, 1), date(2026, 10, 19)) == 12

    def test_before_start(self):
        assert elapsed_index(date(2026, 5, 1), date(2026, 3, 1)) == -1


class TestClassify:
    """Test state of a single month."""

    def test_paid_wins_over_current(self):
        slot = MonthSlot(3, date(2026, 3, 1))
        assert classify(slot, {3}, elapsed=3) == MonthState.PAID

    def test_current(self):
        slot = MonthSlot(3, date(2026, 3, 1))
        assert classify(slot, {1, 2}, elapsed=3) == MonthState.CURRENT

    def test_missed(self):
        slot = MonthSlot(2, date(2026, 2, 1))
        assert classify(slot, {1}, elapsed=3) == MonthState.MISSED


class TestVisibleMonths:
    """Test annotated month list."""

    def test_future_months_hidden(self):
        schedule = build_schedule(date(2026, 1, 1), 10)
        payments = [make_payment(1), make_payment(2)]

        months = visible_months(schedule, payments, date(2026, 4, 10))

        assert [(m.month_number, m.state) for m in months] == [
            (1, MonthState.PAID),
            (2, MonthState.PAID),
            (3, MonthState.MISSED),
            (4, MonthState.CURRENT),
        ]

    def test_paid_ahead_is_visible(self):
        schedule = build_schedule(date(2026, 1, 1), 10)
        payments = [make_payment(1), make_payment(6)]

        months = visible_months(schedule, payments, date(2026, 2, 1))

        assert [m.month_number for m in months] == [1, 2, 6]
        assert months[-1].state == MonthState.PAID

    def test_only_completed_payments_count(self):
        schedule = build_schedule(date(2026, 1, 1), 10)
        payments = [
            make_payment(1, status="pending"),
            make_payment(2, status="failed"),
        ]

        months = visible_months(schedule, payments, date(2026, 3, 5))

        assert [m.state for m in months] == [
            MonthState.MISSED,
            MonthState.MISSED,
            MonthState.CURRENT,
        ]

    def test_bonus_payment_is_not_a_month(self):
        schedule = build_schedule(date(2026, 1, 1), 2)
        payments = [make_payment(None, payment_type="bonus")]

        months = visible_months(schedule, payments, date(2026, 1, 5))

        assert [m.state for m in months] == [MonthState.CURRENT]

    def test_after_plan_end_no_current(self):
        schedule = build_schedule(date(2025, 1, 1), 10)
        payments = [make_payment(n) for n in range(1, 11)]

        months = visible_months(schedule, payments, date(2026, 10, 19))

        assert len(months) == 10
        assert all(m.state == MonthState.PAID for m in months)

    def test_full_schedule_invariants(self):
        schedule = build_schedule(date(2026, 1, 1), 10)
        paid = {1, 2, 5, 9}
        payments = [make_payment(n) for n in paid]
        now = date(2026, 6, 20)
        elapsed = elapsed_index(schedule.start_date, now)

        months = visible_months(schedule, payments, now)

        assert {
            m.month_number for m in months if m.state == MonthState.PAID
        } == paid
        assert sum(1 for m in months if m.state == MonthState.CURRENT) <= 1
        assert all(
            m.month_number <= elapsed or m.month_number in paid
            for m in months
        )
