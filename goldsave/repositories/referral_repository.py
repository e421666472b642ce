"""
Referral repository.

Data access for referral tree edges.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.referral_edge import ReferralEdge
from goldsave.repositories.base import BaseRepository


class ReferralRepository(BaseRepository[ReferralEdge]):
    """Repository for ReferralEdge entity."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(ReferralEdge, session)

    async def get_ancestor_rows(
        self, user_id: int, depth: int
    ) -> list[tuple[int, int]]:
        """
        Get the raw ancestor chain of a user in one round trip.

        The recursion is bounded by depth only, so a corrupt cycle shows
        up as repeated ids; callers are expected to filter them.

        Args:
            user_id: User whose upline is requested
            depth: Maximum number of levels to walk

        Returns:
            (ancestor_id, level) pairs ordered by level ascending
        """
        query = text("""
            WITH RECURSIVE upline(ancestor_id, level) AS (
                -- Base case: direct referrer
                SELECT e.referred_by, 1
                FROM referral_tree_edges e
                WHERE e.user_id = :user_id
                  AND e.referred_by IS NOT NULL

                UNION ALL

                -- Recursive case: referrer of the previous ancestor
                SELECT e.referred_by, u.level + 1
                FROM referral_tree_edges e
                INNER JOIN upline u ON e.user_id = u.ancestor_id
                WHERE e.referred_by IS NOT NULL
                  AND u.level < :depth
            )
            SELECT ancestor_id, level
            FROM upline
            ORDER BY level ASC
        """)

        result = await self.session.execute(
            query, {"user_id": user_id, "depth": depth}
        )
        return [(int(row.ancestor_id), int(row.level)) for row in result]
