"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from goldsave.models.base import Base
from goldsave.models.enums import (
    JobStatus,
    LedgerStatus,
    PaymentStatus,
    PaymentType,
    SubscriptionStatus,
)
from goldsave.models.gold_rate import GoldRate
from goldsave.models.ledger_entry import LedgerEntry
from goldsave.models.payment import Payment
from goldsave.models.plan import Plan
from goldsave.models.referral_edge import ReferralEdge
from goldsave.models.scheduled_commission import ScheduledCommission
from goldsave.models.subscription import Subscription
from goldsave.models.wallet import Wallet

__all__ = [
    # Base
    "Base",
    # Enums
    "JobStatus",
    "LedgerStatus",
    "PaymentStatus",
    "PaymentType",
    "SubscriptionStatus",
    # Engine
    "ScheduledCommission",
    "LedgerEntry",
    # Savings
    "Plan",
    "Subscription",
    "Payment",
    "GoldRate",
    # Referral & balances
    "ReferralEdge",
    "Wallet",
]
