"""
ScheduledCommission repository.

Data access for the commission job queue. Every state transition is a
single conditional UPDATE so concurrent workers never overwrite each
other.
"""

from datetime import UTC, date, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.config.constants import LAST_ERROR_MAX_LENGTH
from goldsave.models.enums import JobStatus
from goldsave.models.scheduled_commission import ScheduledCommission
from goldsave.repositories.base import BaseRepository


class ScheduledCommissionRepository(BaseRepository[ScheduledCommission]):
    """Repository for ScheduledCommission entity."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(ScheduledCommission, session)

    async def get_due(
        self, today: date, limit: int
    ) -> list[ScheduledCommission]:
        """
        Get pending jobs due on or before a date.

        Args:
            today: Current UTC date
            limit: Max number of jobs

        Returns:
            Jobs ordered by scheduled_for ascending (id breaks ties)
        """
        stmt = (
            select(ScheduledCommission)
            .where(
                ScheduledCommission.status == JobStatus.PENDING.value,
                ScheduledCommission.scheduled_for <= today,
            )
            .order_by(
                ScheduledCommission.scheduled_for.asc(),
                ScheduledCommission.id.asc(),
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def claim(
        self, job_id: int, worker_id: str
    ) -> ScheduledCommission | None:
        """
        Move a job from pending to processing for one worker.

        The status predicate makes the transition compare-and-set: when
        two workers race, exactly one UPDATE matches the row.

        Args:
            job_id: Job ID
            worker_id: Claiming worker identity

        Returns:
            Claimed job, or None if it was no longer pending
        """
        stmt = (
            update(ScheduledCommission)
            .where(
                ScheduledCommission.id == job_id,
                ScheduledCommission.status == JobStatus.PENDING.value,
            )
            .values(
                status=JobStatus.PROCESSING.value,
                locked_by=worker_id,
                updated_at=datetime.now(UTC),
            )
            .returning(ScheduledCommission)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_completed(self, job_id: int, worker_id: str) -> bool:
        """
        Mark a claimed job completed.

        Args:
            job_id: Job ID
            worker_id: Worker that holds the claim

        Returns:
            True if the job was still held by this worker
        """
        now = datetime.now(UTC)
        stmt = (
            update(ScheduledCommission)
            .where(
                ScheduledCommission.id == job_id,
                ScheduledCommission.status == JobStatus.PROCESSING.value,
                ScheduledCommission.locked_by == worker_id,
            )
            .values(
                status=JobStatus.COMPLETED.value,
                processed_at=now,
                updated_at=now,
                last_error=None,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_failed(
        self, job_id: int, worker_id: str, error: str
    ) -> bool:
        """
        Mark a claimed job failed and count the attempt.

        Args:
            job_id: Job ID
            worker_id: Worker that holds the claim
            error: Failure description (truncated to fit)

        Returns:
            True if the job was still held by this worker
        """
        stmt = (
            update(ScheduledCommission)
            .where(
                ScheduledCommission.id == job_id,
                ScheduledCommission.status == JobStatus.PROCESSING.value,
                ScheduledCommission.locked_by == worker_id,
            )
            .values(
                status=JobStatus.FAILED.value,
                # Atomic increment, no read-modify-write
                attempts=ScheduledCommission.attempts + 1,
                last_error=error[:LAST_ERROR_MAX_LENGTH],
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def release(
        self, job_id: int, worker_id: str, error: str | None = None
    ) -> bool:
        """
        Hand a claimed job back to the queue without counting an attempt.

        Args:
            job_id: Job ID
            worker_id: Worker that holds the claim
            error: Optional description of why it was released

        Returns:
            True if the job was still held by this worker
        """
        values: dict = {
            "status": JobStatus.PENDING.value,
            "locked_by": None,
            "updated_at": datetime.now(UTC),
        }
        if error is not None:
            values["last_error"] = error[:LAST_ERROR_MAX_LENGTH]

        stmt = (
            update(ScheduledCommission)
            .where(
                ScheduledCommission.id == job_id,
                ScheduledCommission.status == JobStatus.PROCESSING.value,
                ScheduledCommission.locked_by == worker_id,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def reset_failed(self, job_id: int) -> bool:
        """
        Put a failed job back to pending for another try.

        Args:
            job_id: Job ID

        Returns:
            True if the job was failed and is now pending
        """
        stmt = (
            update(ScheduledCommission)
            .where(
                ScheduledCommission.id == job_id,
                ScheduledCommission.status == JobStatus.FAILED.value,
            )
            .values(
                status=JobStatus.PENDING.value,
                locked_by=None,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def get_failed(self, limit: int = 100) -> list[ScheduledCommission]:
        """
        Get failed jobs, most recently updated first.

        Args:
            limit: Max number of jobs

        Returns:
            List of failed jobs
        """
        stmt = (
            select(ScheduledCommission)
            .where(ScheduledCommission.status == JobStatus.FAILED.value)
            .order_by(ScheduledCommission.updated_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
