"""
Commission processor.

Turns one claimed job into referral payouts inside a single
transaction: every wallet credit, every ledger row and the job's
completion commit together or not at all.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.config.constants import MAX_REFERRAL_LEVELS
from goldsave.models.enums import JobStatus, LedgerStatus
from goldsave.models.ledger_entry import LedgerEntry
from goldsave.models.payment import Payment
from goldsave.models.scheduled_commission import ScheduledCommission
from goldsave.repositories.payment_repository import PaymentRepository
from goldsave.repositories.scheduled_commission_repository import (
    ScheduledCommissionRepository,
)
from goldsave.repositories.subscription_repository import (
    SubscriptionRepository,
)
from goldsave.repositories.wallet_repository import WalletRepository
from goldsave.services.commission.rules import (
    CommissionPayload,
    decode_commission_table,
    decode_payload,
)
from goldsave.services.referral.tree_walker import ReferralTreeWalker
from goldsave.utils.exceptions import BusinessRuleFailure, ClaimConflict


@dataclass
class ProcessResult:
    """Result of processing one commission job."""

    job_id: int
    total_paid: Decimal = Decimal("0")
    entries: list[LedgerEntry] = field(default_factory=list)

    @property
    def recipients(self) -> list[int]:
        return [entry.user_id for entry in self.entries]


class CommissionProcessor:
    """
    Applies a claimed job's commissions to the upline.

    The caller owns the claim and handles failures; this class only
    guarantees that a failed call leaves no trace in the store.
    """

    def __init__(
        self,
        session: AsyncSession,
        max_levels: int = MAX_REFERRAL_LEVELS,
    ) -> None:
        """
        Initialize commission processor.

        Args:
            session: Async database session (one transaction per job)
            max_levels: Upline depth cap
        """
        self.session = session
        self.max_levels = max_levels
        self.job_repo = ScheduledCommissionRepository(session)
        self.payment_repo = PaymentRepository(session)
        self.subscription_repo = SubscriptionRepository(session)
        self.wallet_repo = WalletRepository(session)
        self.tree_walker = ReferralTreeWalker(session)

    async def process(
        self, job: ScheduledCommission, worker_id: str
    ) -> ProcessResult:
        """
        Pay out commissions for a claimed job.

        Args:
            job: Job previously claimed by this worker
            worker_id: Worker identity holding the claim

        Returns:
            ProcessResult with the ledger entries written

        Raises:
            ClaimConflict: Job is no longer processing under this worker
                (for example a replay of a completed job)
            BusinessRuleFailure: Payload, payment, plan or upline is invalid
        """
        job_id = job.id
        try:
            await self._ensure_claim_held(job_id, worker_id)
            result = await self._pay_out(job, job_id)

            if not await self.job_repo.mark_completed(job_id, worker_id):
                raise ClaimConflict(
                    "claim lost before completion", job_id=job_id
                )

            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Commission job completed",
            extra={
                "job_id": job_id,
                "worker_id": worker_id,
                "entries": len(result.entries),
                "total_paid": str(result.total_paid),
            },
        )
        return result

    async def _ensure_claim_held(self, job_id: int, worker_id: str) -> None:
        current = await self.job_repo.get_by_id(job_id)
        if current is None:
            raise BusinessRuleFailure("job not found", job_id=job_id)
        if (
            current.status != JobStatus.PROCESSING.value
            or current.locked_by != worker_id
        ):
            raise ClaimConflict(
                f"job is {current.status} (locked_by={current.locked_by})",
                job_id=job_id,
            )

    async def _pay_out(
        self, job: ScheduledCommission, job_id: int
    ) -> ProcessResult:
        payload = decode_payload(job.payload, job_id=job_id)
        payment = await self._load_trigger_payment(payload, job_id)

        subscription = await self.subscription_repo.get_with_plan(
            payment.subscription_id
        )
        if subscription is None or subscription.plan is None:
            raise BusinessRuleFailure(
                f"subscription {payment.subscription_id} or its plan "
                "not found",
                job_id=job_id,
            )

        rules = decode_commission_table(subscription.plan.commission_monthly)
        upline = await self.tree_walker.resolve_upline(
            subscription.user_id, self.max_levels
        )

        result = ProcessResult(job_id=job_id)
        for member in upline:
            amount = rules[member.level - 1].apply(payment.amount)
            if amount <= 0:
                continue

            await self.wallet_repo.credit_referral(member.user_id, amount)

            entry = LedgerEntry(
                user_id=member.user_id,
                from_user_id=subscription.user_id,
                level=member.level,
                amount=amount,
                status=LedgerStatus.CREDITED.value,
                job_id=job_id,
                payment_id=payment.id,
            )
            self.session.add(entry)
            result.entries.append(entry)
            result.total_paid += amount

        # Surface (job_id, level) uniqueness violations before completion
        await self.session.flush()
        return result

    async def _load_trigger_payment(
        self, payload: CommissionPayload, job_id: int
    ) -> Payment:
        payment = await self.payment_repo.get_by_id(payload.payment_id)
        if payment is None:
            raise BusinessRuleFailure(
                f"payment {payload.payment_id} not found", job_id=job_id
            )
        if not payment.is_completed:
            raise BusinessRuleFailure(
                f"payment {payment.id} is {payment.status}, not completed",
                job_id=job_id,
            )
        if payment.is_bonus:
            raise BusinessRuleFailure(
                f"payment {payment.id} is a bonus payment", job_id=job_id
            )
        if (
            payload.subscription_id is not None
            and payload.subscription_id != payment.subscription_id
        ):
            raise BusinessRuleFailure(
                f"payment {payment.id} belongs to subscription "
                f"{payment.subscription_id}, payload says "
                f"{payload.subscription_id}",
                job_id=job_id,
            )
        return payment
