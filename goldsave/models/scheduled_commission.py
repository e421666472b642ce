"""
ScheduledCommission model.

Persisted unit of deferred referral commission work.
"""

from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from goldsave.models.base import Base
from goldsave.models.enums import JobStatus
from goldsave.models.types import JsonType


class ScheduledCommission(Base):
    """
    ScheduledCommission entity.

    Created by the payment-completion path, claimed and processed by
    commission workers, never deleted (audit trail).

    Attributes:
        id: Primary key
        status: pending, processing, completed or failed
        scheduled_for: Date the job becomes due
        locked_by: Identity of the worker holding the claim
        attempts: Number of failed processing attempts
        last_error: Message of the last failure
        payload: Reference to the triggering payment/subscription
        processed_at: When payouts were committed
    """

    __tablename__ = "scheduled_commissions"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'processing', 'completed', 'failed')",
            name="check_scheduled_commission_status",
        ),
        CheckConstraint(
            "attempts >= 0", name="check_scheduled_commission_attempts"
        ),
        Index(
            "idx_scheduled_commissions_due", "status", "scheduled_for"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=JobStatus.PENDING.value
    )
    scheduled_for: Mapped[date] = mapped_column(Date, nullable=False)
    locked_by: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    payload: Mapped[dict[str, Any]] = mapped_column(
        JsonType,
        nullable=False,
        comment="{payment_id, subscription_id} of the triggering payment",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ScheduledCommission(id={self.id}, status={self.status}, "
            f"scheduled_for={self.scheduled_for}, attempts={self.attempts})>"
        )
