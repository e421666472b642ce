"""
Commission cycle runner.

One cycle: verify the store, fetch due jobs, then claim and process
them one at a time. A single job's failure never stops the batch; only
an unreachable store aborts the cycle.
"""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger
from sqlalchemy import text

from goldsave.config.constants import (
    COMMISSION_BATCH_LIMIT,
    MAX_REFERRAL_LEVELS,
)
from goldsave.config.database import (
    StoreConfig,
    create_session_maker,
    create_store_engine,
)
from goldsave.models.enums import JobStatus
from goldsave.models.scheduled_commission import ScheduledCommission
from goldsave.repositories.scheduled_commission_repository import (
    ScheduledCommissionRepository,
)
from goldsave.services.commission.claim_coordinator import ClaimCoordinator
from goldsave.services.commission.processor import (
    CommissionProcessor,
    ProcessResult,
)
from goldsave.utils.exceptions import (
    ClaimConflict,
    CommissionEngineError,
    FatalConfigurationError,
    TransientStoreError,
    classify_store_error,
)


if TYPE_CHECKING:
    from goldsave.config.settings import Settings

T = TypeVar("T")


@dataclass
class CycleSummary:
    """Outcome of one cycle."""

    processed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def add_error(self, job_id: int | None, step: str, message: str) -> None:
        self.errors.append({"id": job_id, "step": step, "message": message})

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


class CycleRunner:
    """
    Drives one worker's commission cycles.

    Owns its engine (built from an explicit StoreConfig) and opens a
    fresh session for every store step, so a failure in one step can
    never leak a half-finished transaction into the next.
    """

    def __init__(
        self,
        store_config: StoreConfig,
        worker_id: str,
        batch_limit: int = COMMISSION_BATCH_LIMIT,
        max_levels: int = MAX_REFERRAL_LEVELS,
    ) -> None:
        """
        Initialize cycle runner.

        Args:
            store_config: Store connection parameters and timeouts
            worker_id: Identity written to locked_by
            batch_limit: Default number of jobs fetched per cycle
            max_levels: Upline depth cap
        """
        self.store_config = store_config
        self.worker_id = worker_id
        self.batch_limit = batch_limit
        self.max_levels = max_levels
        self.engine = create_store_engine(store_config)
        self.session_maker = create_session_maker(self.engine)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CycleRunner":
        """Build a runner for this process from application settings."""
        return cls(
            StoreConfig.from_settings(settings),
            worker_id=settings.effective_worker_id,
            batch_limit=settings.commission_batch_limit,
            max_levels=settings.referral_max_depth,
        )

    async def run_cycle(
        self, limit: int | None = None, today: date | None = None
    ) -> CycleSummary:
        """
        Run one commission cycle.

        Args:
            limit: Max jobs to fetch (defaults to batch_limit)
            today: Current date (defaults to today in UTC)

        Returns:
            CycleSummary with per-job counts and errors

        Raises:
            FatalConfigurationError: Store unreachable
        """
        summary = CycleSummary()
        limit = limit if limit is not None else self.batch_limit
        today = today or datetime.now(UTC).date()

        await self._verify_store()

        try:
            jobs = await self._store_call(self._fetch_due(limit, today))
        except Exception as e:
            error = classify_store_error(e)
            logger.error(
                f"Failed to fetch due commission jobs: {error.message}",
                extra={"worker_id": self.worker_id},
            )
            summary.add_error(None, "fetch", error.message)
            return summary

        logger.info(
            f"Processing {len(jobs)} due commission jobs",
            extra={"worker_id": self.worker_id, "today": today.isoformat()},
        )

        for job in jobs:
            await self._handle_job(job.id, summary)

        logger.info(
            "Commission cycle complete",
            extra={"worker_id": self.worker_id, **summary.to_dict()},
        )
        return summary

    async def dispose(self) -> None:
        """Release the engine's connections."""
        await self.engine.dispose()

    async def _handle_job(self, job_id: int, summary: CycleSummary) -> None:
        try:
            claimed = await self._store_call(self._claim(job_id))
        except Exception as e:
            error = classify_store_error(e, job_id)
            logger.warning(
                f"Claim failed, job left for next cycle: {error.message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
            # The claim may have committed before the failure surfaced
            await self._release(job_id, error.message)
            summary.skipped += 1
            summary.add_error(job_id, "claim", error.message)
            return

        if claimed is None:
            summary.skipped += 1
            return

        try:
            await asyncio.wait_for(
                self._process(claimed),
                timeout=self.store_config.transaction_timeout_seconds,
            )
        except ClaimConflict as e:
            logger.debug(
                f"Claim lost during processing: {e.message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
            summary.skipped += 1
            return
        except Exception as e:
            await self._handle_process_error(
                job_id, classify_store_error(e, job_id), summary
            )
            return

        summary.processed += 1

    async def _handle_process_error(
        self, job_id: int, error: CommissionEngineError, summary: CycleSummary
    ) -> None:
        transient = isinstance(error, TransientStoreError) and not error.timed_out
        if transient:
            # Infrastructure trouble: back to the queue, no attempt used
            settled = await self._release(job_id, error.message)
        else:
            settled = await self._mark_failed(job_id, error.message, summary)

        # Guard missed: the payout may have committed before the error surfaced
        if not settled and await self._completed_by_self(job_id, summary):
            logger.warning(
                f"Payout committed despite error, counted as processed: "
                f"{error.message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
            summary.processed += 1
            return

        if transient:
            summary.skipped += 1
        else:
            logger.error(
                f"Commission job failed: {error.message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
            summary.failed += 1
        summary.add_error(job_id, "process", error.message)

    async def _verify_store(self) -> None:
        async def ping() -> None:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

        try:
            await self._store_call(ping())
        except Exception as e:
            error = classify_store_error(e)
            logger.critical(
                f"Store unreachable, aborting cycle: {error.message}",
                extra={"worker_id": self.worker_id},
            )
            raise FatalConfigurationError(
                f"store unreachable: {error.message}"
            ) from e

    async def _store_call(self, coro: Awaitable[T]) -> T:
        return await asyncio.wait_for(
            coro, timeout=self.store_config.store_timeout_seconds
        )

    async def _fetch_due(
        self, limit: int, today: date
    ) -> list[ScheduledCommission]:
        async with self.session_maker() as session:
            return await ClaimCoordinator(session).fetch_due(limit, today)

    async def _claim(self, job_id: int) -> ScheduledCommission | None:
        async with self.session_maker() as session:
            return await ClaimCoordinator(session).claim(
                job_id, self.worker_id
            )

    async def _process(self, job: ScheduledCommission) -> ProcessResult:
        async with self.session_maker() as session:
            processor = CommissionProcessor(session, self.max_levels)
            return await processor.process(job, self.worker_id)

    async def _mark_failed(
        self, job_id: int, message: str, summary: CycleSummary
    ) -> bool:
        async def mark() -> bool:
            async with self.session_maker() as session:
                marked = await ScheduledCommissionRepository(
                    session
                ).mark_failed(job_id, self.worker_id, message)
                await session.commit()
                return marked

        try:
            marked = await self._store_call(mark())
        except Exception as e:
            error = classify_store_error(e, job_id)
            logger.error(
                f"Could not mark job failed: {error.message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
            summary.add_error(job_id, "mark_failed", error.message)
            return False

        if not marked:
            logger.warning(
                "Job no longer held by this worker, not marked failed",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
        return marked

    async def _release(self, job_id: int, message: str) -> bool:
        async def release() -> bool:
            async with self.session_maker() as session:
                released = await ScheduledCommissionRepository(
                    session
                ).release(job_id, self.worker_id, message)
                await session.commit()
                return released

        try:
            released = await self._store_call(release())
        except Exception as e:
            error = classify_store_error(e, job_id)
            logger.error(
                f"Could not release job, it stays processing: {error.message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
            return False

        if released:
            logger.warning(
                f"Job released after transient error: {message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
        return released

    async def _completed_by_self(
        self, job_id: int, summary: CycleSummary
    ) -> bool:
        """Check whether this worker's payout for a job committed."""

        async def load() -> ScheduledCommission | None:
            async with self.session_maker() as session:
                return await ScheduledCommissionRepository(session).get_by_id(
                    job_id
                )

        try:
            job = await self._store_call(load())
        except Exception as e:
            error = classify_store_error(e, job_id)
            logger.error(
                f"Could not re-read job state: {error.message}",
                extra={"job_id": job_id, "worker_id": self.worker_id},
            )
            summary.add_error(job_id, "reconcile", error.message)
            return False

        return (
            job is not None
            and job.status == JobStatus.COMPLETED.value
            and job.locked_by == self.worker_id
        )
