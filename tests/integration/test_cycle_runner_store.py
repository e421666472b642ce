"""
Integration tests for full commission cycles against a database.
"""

import asyncio
from dataclasses import replace
from datetime import timedelta
from unittest.mock import patch

import pytest
import pytest_asyncio

from goldsave.config.database import StoreConfig
from goldsave.models import LedgerEntry, ScheduledCommission
from goldsave.services.commission.claim_coordinator import ClaimCoordinator
from goldsave.services.commission.cycle_runner import CycleRunner
from goldsave.services.commission.job_admin import CommissionJobAdmin
from goldsave.services.commission.processor import CommissionProcessor
from goldsave.services.commission.scheduler import CommissionScheduler
from goldsave.utils.exceptions import BusinessRuleFailure, FatalConfigurationError

from .store import (
    SUBSCRIBER_ID,
    TODAY,
    UPLINE_IDS,
    count_rows,
    load,
    set_commission_table,
)


@pytest_asyncio.fixture
async def runner(store_config, engine):
    runner = CycleRunner(store_config, worker_id="worker-a")
    yield runner
    await runner.dispose()


class TestRunCycle:
    """Test cycles end to end."""

    @pytest.mark.asyncio
    async def test_good_and_bad_jobs(self, scenario, seed, session_maker, runner):
        bad = await seed.job(payload={"payment_id": "not-a-number"})
        future = await seed.job(
            scenario["payment"], scheduled_for=TODAY + timedelta(days=1)
        )

        summary = await runner.run_cycle(today=TODAY)

        assert summary.processed == 1
        assert summary.failed == 1
        assert summary.skipped == 0
        assert summary.errors[0]["id"] == bad.id
        assert summary.errors[0]["step"] == "process"

        failed = await load(session_maker, ScheduledCommission, bad.id)
        assert failed.status == "failed"
        assert failed.attempts == 1
        assert "invalid payload" in failed.last_error
        assert failed.locked_by == "worker-a"

        done = await load(session_maker, ScheduledCommission, scenario["job"].id)
        assert done.status == "completed"

        waiting = await load(session_maker, ScheduledCommission, future.id)
        assert waiting.status == "pending"
        assert await count_rows(session_maker, LedgerEntry) == 3

    @pytest.mark.asyncio
    async def test_failed_jobs_not_retried(self, seed, session_maker, runner):
        bad = await seed.job(payload={})

        await runner.run_cycle(today=TODAY)
        second = await runner.run_cycle(today=TODAY)

        assert second.to_dict() == {
            "processed": 0, "failed": 0, "skipped": 0, "errors": []
        }
        stored = await load(session_maker, ScheduledCommission, bad.id)
        assert stored.attempts == 1

    @pytest.mark.asyncio
    async def test_reset_and_retry(self, scenario, seed, session_maker, runner):
        # Plan is broken on the first run
        await set_commission_table(session_maker, scenario["plan"].id, ["bad"])
        first = await runner.run_cycle(today=TODAY)
        assert first.failed == 1

        job_id = scenario["job"].id
        async with session_maker() as session:
            admin = CommissionJobAdmin(session)
            assert [j.id for j in await admin.list_failed()] == [job_id]
            assert await admin.reset_failed(job_id) is True
            assert await admin.reset_failed(job_id) is False

        reset = await load(session_maker, ScheduledCommission, job_id)
        assert reset.status == "pending"
        assert reset.locked_by is None
        assert reset.attempts == 1
        assert reset.last_error is not None

        await set_commission_table(
            session_maker, scenario["plan"].id, ["50", "40", "30"]
        )
        second = await runner.run_cycle(today=TODAY)

        assert second.processed == 1
        stored = await load(session_maker, ScheduledCommission, job_id)
        assert stored.status == "completed"
        assert stored.attempts == 1

    @pytest.mark.asyncio
    async def test_limit(self, scenario, seed, runner):
        await seed.job(scenario["payment"], scheduled_for=TODAY)

        summary = await runner.run_cycle(limit=1, today=TODAY)

        assert summary.processed == 1

    @pytest.mark.asyncio
    async def test_two_workers_share_queue(self, scenario, store_config, runner):
        other = CycleRunner(store_config, worker_id="worker-b")
        try:
            first = await runner.run_cycle(today=TODAY)
            second = await other.run_cycle(today=TODAY)
        finally:
            await other.dispose()

        assert first.processed == 1
        assert second.processed == 0

    @pytest.mark.asyncio
    async def test_unreachable_store_is_fatal(self, tmp_path):
        config = StoreConfig(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}",
            store_timeout_seconds=2.0,
        )
        runner = CycleRunner(config, worker_id="worker-a")
        try:
            with pytest.raises(FatalConfigurationError, match="store unreachable"):
                await runner.run_cycle(today=TODAY)
        finally:
            await runner.dispose()


class TestLateAcknowledgement:
    """Test store writes that commit but report a timeout."""

    @pytest.mark.asyncio
    async def test_committed_claim_is_released(
        self, scenario, store_config, session_maker, runner
    ):
        real_claim = ClaimCoordinator.claim

        async def slow_claim(self, job_id, worker_id):
            job = await real_claim(self, job_id, worker_id)
            await asyncio.sleep(1)
            return job

        impatient = CycleRunner(
            replace(store_config, store_timeout_seconds=0.3),
            worker_id="worker-a",
        )
        try:
            with patch.object(ClaimCoordinator, "claim", slow_claim):
                first = await impatient.run_cycle(today=TODAY)
        finally:
            await impatient.dispose()

        assert first.skipped == 1
        assert first.errors[0]["step"] == "claim"

        job_id = scenario["job"].id
        released = await load(session_maker, ScheduledCommission, job_id)
        assert released.status == "pending"
        assert released.locked_by is None
        assert released.attempts == 0

        second = await runner.run_cycle(today=TODAY)

        assert second.processed == 1
        assert await count_rows(session_maker, LedgerEntry, job_id=job_id) == 3

    @pytest.mark.asyncio
    async def test_committed_payout_counts_processed(
        self, scenario, store_config, session_maker
    ):
        real_process = CommissionProcessor.process

        async def slow_process(self, job, worker_id):
            result = await real_process(self, job, worker_id)
            await asyncio.sleep(1)
            return result

        impatient = CycleRunner(
            replace(store_config, transaction_timeout_seconds=0.3),
            worker_id="worker-a",
        )
        try:
            with patch.object(CommissionProcessor, "process", slow_process):
                summary = await impatient.run_cycle(today=TODAY)
        finally:
            await impatient.dispose()

        assert summary.to_dict() == {
            "processed": 1, "failed": 0, "skipped": 0, "errors": []
        }

        job_id = scenario["job"].id
        stored = await load(session_maker, ScheduledCommission, job_id)
        assert stored.status == "completed"
        assert stored.attempts == 0
        assert await count_rows(session_maker, LedgerEntry, job_id=job_id) == 3

    @pytest.mark.asyncio
    async def test_release_of_unheld_job_reports_false(
        self, scenario, session_maker, runner
    ):
        job_id = scenario["job"].id

        assert await runner._release(job_id, "connection reset") is False

        stored = await load(session_maker, ScheduledCommission, job_id)
        assert stored.status == "pending"
        assert stored.last_error is None


class TestScheduler:
    """Test job creation for completed payments."""

    @pytest.mark.asyncio
    async def test_scheduled_job_is_processed(self, seed, session_maker, runner, commission_table):
        await seed.chain(SUBSCRIBER_ID, *UPLINE_IDS)
        plan = await seed.plan(commission_monthly=commission_table)
        subscription = await seed.subscription(plan)
        payment = await seed.payment(subscription, month_number=2)

        async with session_maker() as session:
            job = await CommissionScheduler(session).schedule_for_payment(
                payment.id, scheduled_for=TODAY
            )

        assert job.status == "pending"
        assert job.payload == {
            "payment_id": payment.id,
            "subscription_id": subscription.id,
        }

        summary = await runner.run_cycle(today=TODAY)

        assert summary.processed == 1
        assert await count_rows(session_maker, LedgerEntry, job_id=job.id) == 3

    @pytest.mark.asyncio
    async def test_pending_payment_not_scheduled(self, seed, session_maker):
        plan = await seed.plan()
        subscription = await seed.subscription(plan)
        payment = await seed.payment(subscription, status="pending")

        async with session_maker() as session:
            with pytest.raises(BusinessRuleFailure):
                await CommissionScheduler(session).schedule_for_payment(payment.id)
