"""
GoldRate model.

Daily gold price used to convert rupee amounts into gold weight.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date
from sqlalchemy.orm import Mapped, mapped_column

from goldsave.models.base import Base
from goldsave.models.types import RateType


class GoldRate(Base):
    """GoldRate model - price per gram on a date."""

    __tablename__ = "gold_rates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    rate_per_gram: Mapped[Decimal] = mapped_column(RateType, nullable=False)
    rate_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<GoldRate(rate_date={self.rate_date}, rate={self.rate_per_gram})>"
