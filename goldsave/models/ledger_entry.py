"""
LedgerEntry model.

One referral commission credited to one upline member for one job.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from goldsave.models.base import Base
from goldsave.models.enums import LedgerStatus
from goldsave.models.types import MoneyType


class LedgerEntry(Base):
    """
    LedgerEntry entity.

    Attributes:
        id: Primary key
        user_id: Recipient (upline member)
        from_user_id: Subscriber whose payment triggered the commission
        level: Position of the recipient in the upline (1..10)
        amount: Credited amount
        status: Ledger status
        job_id: Scheduled commission that produced the entry
        payment_id: Triggering payment
    """

    __tablename__ = "referral_commissions"
    __table_args__ = (
        CheckConstraint(
            "level >= 1 AND level <= 10", name="check_referral_commission_level"
        ),
        CheckConstraint("amount > 0", name="check_referral_commission_amount"),
        # A job pays each level at most once, even if replayed
        UniqueConstraint("job_id", "level", name="uq_referral_commission_job_level"),
        Index("idx_referral_commissions_user_level", "user_id", "level"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    from_user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LedgerStatus.CREDITED.value
    )

    job_id: Mapped[int] = mapped_column(
        ForeignKey("scheduled_commissions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    payment_id: Mapped[int | None] = mapped_column(
        ForeignKey("payments.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<LedgerEntry(id={self.id}, user_id={self.user_id}, "
            f"level={self.level}, amount={self.amount})>"
        )
