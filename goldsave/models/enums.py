"""
Status enumerations shared by models and services.
"""

from enum import StrEnum


class JobStatus(StrEnum):
    """Scheduled commission job lifecycle."""

    PENDING = "pending"  # Waiting for a worker
    PROCESSING = "processing"  # Claimed by exactly one worker
    COMPLETED = "completed"  # Payouts committed
    FAILED = "failed"  # Terminal until reset by an operator


class PaymentStatus(StrEnum):
    """Payment status."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentType(StrEnum):
    """Payment type."""

    MONTHLY = "monthly"
    BONUS = "bonus"


class LedgerStatus(StrEnum):
    """Referral commission ledger entry status."""

    CREDITED = "credited"  # Added to the recipient's wallet


class SubscriptionStatus(StrEnum):
    """Subscription status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
