"""
Payment model.

Monthly instalments and the one-time completion bonus.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goldsave.models.base import Base
from goldsave.models.enums import PaymentStatus, PaymentType
from goldsave.models.types import GoldWeightType, MoneyType, RateType


if TYPE_CHECKING:
    from goldsave.models.subscription import Subscription


_BONUS_ROWS = text("payment_type = 'bonus'")


class Payment(Base):
    """Payment model - subscription payments."""

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name="check_payment_status",
        ),
        CheckConstraint(
            "payment_type IN ('monthly', 'bonus')",
            name="check_payment_type",
        ),
        CheckConstraint("amount >= 0", name="check_payment_amount"),
        # At most one bonus payment per subscription, ever
        Index(
            "uq_payments_bonus_per_subscription",
            "subscription_id",
            unique=True,
            postgresql_where=_BONUS_ROWS,
            sqlite_where=_BONUS_ROWS,
        ),
        Index("idx_payments_subscription_status", "subscription_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    subscription_id: Mapped[int] = mapped_column(
        ForeignKey("subscriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # 1-based month of the plan; NULL for bonus payments
    month_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value
    )
    payment_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentType.MONTHLY.value
    )

    # Gold bought with this payment
    gold_rate: Mapped[Decimal | None] = mapped_column(RateType, nullable=True)
    gold_mg: Mapped[Decimal | None] = mapped_column(
        GoldWeightType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    subscription: Mapped["Subscription"] = relationship(
        "Subscription", back_populates="payments", lazy="raise"
    )

    @property
    def is_completed(self) -> bool:
        return str(self.status).lower() == PaymentStatus.COMPLETED

    @property
    def is_bonus(self) -> bool:
        return str(self.payment_type or "").lower() == PaymentType.BONUS

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Payment(id={self.id}, subscription_id={self.subscription_id}, "
            f"month={self.month_number}, type={self.payment_type}, "
            f"status={self.status})>"
        )
