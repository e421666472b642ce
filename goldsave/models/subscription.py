"""
Subscription model.

A subscriber's enrolment in a plan.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goldsave.models.base import Base
from goldsave.models.enums import SubscriptionStatus
from goldsave.models.types import MoneyType


if TYPE_CHECKING:
    from goldsave.models.payment import Payment
    from goldsave.models.plan import Plan


class Subscription(Base):
    """
    Subscription entity.

    Whether the completion bonus was allocated is not stored here: it is
    derived from the existence of a bonus Payment.
    """

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True
    )
    plan_id: Mapped[int] = mapped_column(
        ForeignKey("plans.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value
    )
    total_paid: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    bonus_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    plan: Mapped["Plan"] = relationship("Plan", lazy="raise")
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="subscription", lazy="raise"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Subscription(id={self.id}, user_id={self.user_id}, "
            f"plan_id={self.plan_id}, status={self.status})>"
        )
