"""
Plan model.

Savings scheme parameters, including the per-level commission table.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from goldsave.models.base import Base
from goldsave.models.types import MoneyType, TextListType


class Plan(Base):
    """Plan model - monthly savings scheme."""

    __tablename__ = "plans"
    __table_args__ = (
        CheckConstraint("total_months > 0", name="check_plan_total_months"),
        CheckConstraint("monthly_due >= 0", name="check_plan_monthly_due"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    scheme_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    monthly_due: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    total_months: Mapped[int] = mapped_column(Integer, nullable=False)

    # Completion bonus (rupees), copied into subscriptions at signup
    bonus: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    # One entry per upline level: "50" (fixed rupees) or "5%" (of payment)
    commission_monthly: Mapped[list[str] | None] = mapped_column(
        TextListType, nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Plan(id={self.id}, scheme_name={self.scheme_name!r}, "
            f"total_months={self.total_months})>"
        )
