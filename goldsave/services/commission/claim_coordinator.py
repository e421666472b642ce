"""
Claim coordinator.

Finds due commission jobs and hands each to at most one worker.
"""

from datetime import UTC, date, datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.config.constants import COMMISSION_BATCH_LIMIT
from goldsave.models.scheduled_commission import ScheduledCommission
from goldsave.repositories.scheduled_commission_repository import (
    ScheduledCommissionRepository,
)


class ClaimCoordinator:
    """Fetch and claim operations over the scheduled commission queue."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize claim coordinator.

        Args:
            session: Async database session
        """
        self.session = session
        self.job_repo = ScheduledCommissionRepository(session)

    async def fetch_due(
        self,
        limit: int = COMMISSION_BATCH_LIMIT,
        today: date | None = None,
    ) -> list[ScheduledCommission]:
        """
        Get pending jobs whose scheduled date has arrived.

        Args:
            limit: Max number of jobs
            today: Current date (defaults to today in UTC)

        Returns:
            Due jobs, oldest schedule first. Future-dated jobs are never
            returned.
        """
        today = today or datetime.now(UTC).date()
        jobs = await self.job_repo.get_due(today, limit)

        logger.debug(
            "Fetched due commission jobs",
            extra={"count": len(jobs), "today": today.isoformat()},
        )
        return jobs

    async def claim(
        self, job_id: int, worker_id: str
    ) -> ScheduledCommission | None:
        """
        Claim a job for a worker.

        Args:
            job_id: Job ID
            worker_id: Claiming worker identity

        Returns:
            Claimed job, or None if another worker got it first
        """
        job = await self.job_repo.claim(job_id, worker_id)
        await self.session.commit()

        if job is None:
            logger.debug(
                "Job already claimed",
                extra={"job_id": job_id, "worker_id": worker_id},
            )
        return job
