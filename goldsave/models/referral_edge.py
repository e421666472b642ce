"""
ReferralEdge model.

One row per user naming who referred them. The edges form a forest;
levels are derived by walking referred_by, never stored.
"""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from goldsave.models.base import Base


class ReferralEdge(Base):
    """ReferralEdge model - who referred whom."""

    __tablename__ = "referral_tree_edges"
    __table_args__ = (
        CheckConstraint(
            "referred_by IS NULL OR referred_by <> user_id",
            name="check_referral_edge_not_self",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, nullable=False, unique=True
    )
    referred_by: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralEdge(user_id={self.user_id}, "
            f"referred_by={self.referred_by})>"
        )
