"""
Commission scheduler.

Payment-completion side of the queue: creates the pending job that a
worker will later pick up.
"""

from datetime import UTC, date, datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from goldsave.models.enums import JobStatus
from goldsave.models.scheduled_commission import ScheduledCommission
from goldsave.repositories.payment_repository import PaymentRepository
from goldsave.repositories.scheduled_commission_repository import (
    ScheduledCommissionRepository,
)
from goldsave.utils.exceptions import BusinessRuleFailure


class CommissionScheduler:
    """Creates scheduled commission jobs for completed payments."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.job_repo = ScheduledCommissionRepository(session)
        self.payment_repo = PaymentRepository(session)

    async def schedule_for_payment(
        self, payment_id: int, scheduled_for: date | None = None
    ) -> ScheduledCommission:
        """
        Queue commission processing for a completed monthly payment.

        Args:
            payment_id: Completed monthly payment
            scheduled_for: Due date (defaults to today in UTC)

        Returns:
            Created pending job

        Raises:
            BusinessRuleFailure: Payment missing, not completed or a bonus
        """
        payment = await self.payment_repo.get_by_id(payment_id)
        if payment is None:
            raise BusinessRuleFailure(f"payment {payment_id} not found")
        if not payment.is_completed or payment.is_bonus:
            raise BusinessRuleFailure(
                f"payment {payment_id} does not earn commission "
                f"(status={payment.status}, type={payment.payment_type})"
            )

        job = await self.job_repo.create(
            status=JobStatus.PENDING.value,
            scheduled_for=scheduled_for or datetime.now(UTC).date(),
            attempts=0,
            payload={
                "payment_id": payment.id,
                "subscription_id": payment.subscription_id,
            },
        )
        await self.session.commit()

        logger.info(
            "Commission job scheduled",
            extra={
                "job_id": job.id,
                "payment_id": payment.id,
                "scheduled_for": job.scheduled_for.isoformat(),
            },
        )
        return job
