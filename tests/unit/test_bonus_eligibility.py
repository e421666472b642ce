"""
Unit tests for completion bonus eligibility and gold conversion.
"""

from decimal import Decimal

import pytest

from goldsave.models.payment import Payment
from goldsave.models.plan import Plan
from goldsave.models.subscription import Subscription
from goldsave.services.subscription.bonus_allocator import (
    gold_weight_mg,
    is_eligible,
)
from goldsave.utils.exceptions import BusinessRuleFailure


@pytest.fixture
def plan():
    """Ten-month plan."""
    return Plan(scheme_name="Gold 10", monthly_due=Decimal("1000"), total_months=10)


@pytest.fixture
def subscription():
    """Subscription with a 4500 completion bonus."""
    return Subscription(user_id=1, plan_id=1, bonus_amount=Decimal("4500.00"))


def monthly(n, status="completed"):
    return Payment(
        subscription_id=1,
        month_number=n,
        amount=Decimal("1000"),
        status=status,
        payment_type="monthly",
    )


def bonus():
    return Payment(
        subscription_id=1,
        month_number=None,
        amount=Decimal("4500"),
        status="completed",
        payment_type="bonus",
    )


class TestIsEligible:
    """Test bonus eligibility rules."""

    def test_all_months_completed(self, subscription, plan):
        payments = [monthly(n) for n in range(1, 11)]
        assert is_eligible(subscription, plan, payments) is True

    def test_one_month_short(self, subscription, plan):
        payments = [monthly(n) for n in range(1, 10)]
        assert is_eligible(subscription, plan, payments) is False

    def test_pending_payments_do_not_count(self, subscription, plan):
        payments = [monthly(n) for n in range(1, 10)]
        payments.append(monthly(10, status="pending"))
        assert is_eligible(subscription, plan, payments) is False

    def test_already_allocated(self, subscription, plan):
        payments = [monthly(n) for n in range(1, 11)] + [bonus()]
        assert is_eligible(subscription, plan, payments) is False

    def test_bonus_payment_not_counted_as_month(self, subscription, plan):
        payments = [monthly(n) for n in range(1, 10)] + [bonus()]
        assert is_eligible(subscription, plan, payments) is False

    @pytest.mark.parametrize("amount", [Decimal("0"), None])
    def test_no_bonus_configured(self, plan, amount):
        sub = Subscription(user_id=1, plan_id=1, bonus_amount=amount)
        payments = [monthly(n) for n in range(1, 11)]
        assert is_eligible(sub, plan, payments) is False


class TestGoldWeight:
    """Test rupee to milligram conversion."""

    def test_exact(self):
        assert gold_weight_mg(Decimal("4500"), Decimal("6000")) == Decimal("750.000")

    def test_rounded_to_three_places(self):
        # 1000 / 6123.45 * 1000 = 163.3066...
        assert gold_weight_mg(Decimal("1000"), Decimal("6123.45")) == Decimal("163.307")

    def test_invalid_rate(self):
        with pytest.raises(BusinessRuleFailure):
            gold_weight_mg(Decimal("1000"), Decimal("0"))
