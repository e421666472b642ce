"""
Repositories.

Data access layer for all models.
"""

from goldsave.repositories.base import BaseRepository
from goldsave.repositories.gold_rate_repository import GoldRateRepository
from goldsave.repositories.ledger_repository import LedgerRepository
from goldsave.repositories.payment_repository import PaymentRepository
from goldsave.repositories.referral_repository import ReferralRepository
from goldsave.repositories.scheduled_commission_repository import (
    ScheduledCommissionRepository,
)
from goldsave.repositories.subscription_repository import (
    SubscriptionRepository,
)
from goldsave.repositories.wallet_repository import WalletRepository

__all__ = [
    "BaseRepository",
    "GoldRateRepository",
    "LedgerRepository",
    "PaymentRepository",
    "ReferralRepository",
    "ScheduledCommissionRepository",
    "SubscriptionRepository",
    "WalletRepository",
]
