"""
Referral tree walker.

Resolves the upline of a subscriber: the ordered list of ancestors who
receive commissions on the subscriber's payments.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.config.constants import MAX_REFERRAL_LEVELS
from goldsave.repositories.referral_repository import ReferralRepository


@dataclass(frozen=True)
class UplineMember:
    """Ancestor at a given level (1 = direct referrer)."""

    user_id: int
    level: int


class ReferralTreeWalker:
    """Walks referred_by edges upward from a subscriber."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize tree walker.

        Args:
            session: Async database session
        """
        self.referral_repo = ReferralRepository(session)

    async def resolve_upline(
        self, subscriber_id: int, max_levels: int = MAX_REFERRAL_LEVELS
    ) -> list[UplineMember]:
        """
        Get the subscriber's upline, nearest ancestor first.

        Stops at a root user, after max_levels ancestors, or as soon as
        an id repeats (corrupt cyclic data). Nobody is ever paid twice for
        one payment and the subscriber never appears in their own upline.

        Args:
            subscriber_id: User whose payment triggered the commission
            max_levels: Depth cap (never more than MAX_REFERRAL_LEVELS)

        Returns:
            Upline members with levels 1..n, n <= max_levels
        """
        depth = max(0, min(max_levels, MAX_REFERRAL_LEVELS))
        if depth == 0:
            return []

        rows = await self.referral_repo.get_ancestor_rows(subscriber_id, depth)

        visited = {subscriber_id}
        upline: list[UplineMember] = []
        for ancestor_id, level in rows:
            if ancestor_id in visited:
                logger.warning(
                    "Referral cycle detected, truncating upline",
                    extra={
                        "subscriber_id": subscriber_id,
                        "ancestor_id": ancestor_id,
                        "level": level,
                    },
                )
                break
            visited.add(ancestor_id)
            upline.append(UplineMember(user_id=ancestor_id, level=level))

        return upline
