"""
Integration tests for fetching and claiming commission jobs.
"""

import asyncio
from datetime import timedelta

import pytest

from goldsave.models import ScheduledCommission
from goldsave.services.commission.claim_coordinator import ClaimCoordinator

from .store import TODAY, load


class TestFetchDue:
    """Test due-job selection."""

    @pytest.mark.asyncio
    async def test_yesterday_due_tomorrow_not(self, seed, session_maker):
        payload = {"payment_id": 1}
        job_x = await seed.job(scheduled_for=TODAY - timedelta(days=1), payload=payload)
        await seed.job(scheduled_for=TODAY + timedelta(days=1), payload=payload)

        async with session_maker() as session:
            jobs = await ClaimCoordinator(session).fetch_due(50, today=TODAY)

        assert [j.id for j in jobs] == [job_x.id]

    @pytest.mark.asyncio
    async def test_ordered_by_schedule_and_limited(self, seed, session_maker):
        payload = {"payment_id": 1}
        late = await seed.job(scheduled_for=TODAY, payload=payload)
        early = await seed.job(scheduled_for=TODAY - timedelta(days=5), payload=payload)
        middle = await seed.job(scheduled_for=TODAY - timedelta(days=2), payload=payload)

        async with session_maker() as session:
            coordinator = ClaimCoordinator(session)
            all_due = await coordinator.fetch_due(50, today=TODAY)
            first_two = await coordinator.fetch_due(2, today=TODAY)

        assert [j.id for j in all_due] == [early.id, middle.id, late.id]
        assert [j.id for j in first_two] == [early.id, middle.id]

    @pytest.mark.asyncio
    async def test_only_pending_jobs(self, seed, session_maker):
        payload = {"payment_id": 1}
        pending = await seed.job(payload=payload)
        for status in ("processing", "completed", "failed"):
            await seed.job(payload=payload, status=status)

        async with session_maker() as session:
            jobs = await ClaimCoordinator(session).fetch_due(50, today=TODAY)

        assert [j.id for j in jobs] == [pending.id]


class TestClaim:
    """Test the compare-and-set claim."""

    @pytest.mark.asyncio
    async def test_claim_sets_owner(self, seed, session_maker):
        job = await seed.job(payload={"payment_id": 1})

        async with session_maker() as session:
            claimed = await ClaimCoordinator(session).claim(job.id, "worker-a")

        assert claimed is not None
        stored = await load(session_maker, ScheduledCommission, job.id)
        assert stored.status == "processing"
        assert stored.locked_by == "worker-a"
        assert stored.attempts == 0

    @pytest.mark.asyncio
    async def test_second_claim_fails(self, seed, session_maker):
        job = await seed.job(payload={"payment_id": 1})

        async with session_maker() as session:
            first = await ClaimCoordinator(session).claim(job.id, "worker-a")
        async with session_maker() as session:
            second = await ClaimCoordinator(session).claim(job.id, "worker-b")

        assert first is not None
        assert second is None
        stored = await load(session_maker, ScheduledCommission, job.id)
        assert stored.locked_by == "worker-a"

    @pytest.mark.asyncio
    async def test_concurrent_claims_single_winner(self, seed, session_maker):
        job = await seed.job(payload={"payment_id": 1})

        async def claim(worker_id):
            async with session_maker() as session:
                return await ClaimCoordinator(session).claim(job.id, worker_id)

        results = await asyncio.gather(
            claim("worker-a"), claim("worker-b"), claim("worker-c")
        )

        winners = [r for r in results if r is not None]
        assert len(winners) == 1
        stored = await load(session_maker, ScheduledCommission, job.id)
        assert stored.locked_by == winners[0].locked_by

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["completed", "failed", "processing"])
    async def test_non_pending_not_claimable(self, seed, session_maker, status):
        job = await seed.job(payload={"payment_id": 1}, status=status)

        async with session_maker() as session:
            claimed = await ClaimCoordinator(session).claim(job.id, "worker-a")

        assert claimed is None
