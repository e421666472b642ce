"""
Commission job administration.

Failed jobs are never retried automatically; an operator inspects them
and puts them back in the queue explicitly.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.scheduled_commission import ScheduledCommission
from goldsave.repositories.scheduled_commission_repository import (
    ScheduledCommissionRepository,
)


class CommissionJobAdmin:
    """Operator actions on failed commission jobs."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.job_repo = ScheduledCommissionRepository(session)

    async def list_failed(self, limit: int = 100) -> list[ScheduledCommission]:
        """Get failed jobs, most recent first."""
        return await self.job_repo.get_failed(limit)

    async def reset_failed(self, job_id: int) -> bool:
        """
        Put a failed job back to pending.

        attempts and last_error are kept for the audit trail.

        Args:
            job_id: Job ID

        Returns:
            True if reset, False if the job is not in failed state
        """
        reset = await self.job_repo.reset_failed(job_id)
        await self.session.commit()

        if reset:
            logger.info("Failed commission job reset", extra={"job_id": job_id})
        else:
            logger.warning(
                "Job not reset: not found or not failed",
                extra={"job_id": job_id},
            )
        return reset
