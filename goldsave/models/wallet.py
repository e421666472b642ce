"""
Wallet model.

Per-user running balances credited by ledger writes.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from goldsave.models.base import Base
from goldsave.models.types import MoneyType


class Wallet(Base):
    """Wallet model - user balances."""

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint(
            "referral_balance >= 0", name="check_wallet_referral_non_negative"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, nullable=False, unique=True
    )

    savings_balance: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    referral_balance: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_balance: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Wallet(user_id={self.user_id}, "
            f"referral={self.referral_balance}, total={self.total_balance})>"
        )
