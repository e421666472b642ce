"""
Bonus allocation task.

Allocates the completion bonus of a subscription once its last monthly
payment has completed.
"""

import dramatiq
from loguru import logger

from goldsave.config.database import (
    StoreConfig,
    create_session_maker,
    create_store_engine,
)
from goldsave.services.subscription.bonus_allocator import BonusAllocator
from jobs.async_runner import run_async
from jobs.broker import settings


@dramatiq.actor(max_retries=3, time_limit=60_000)
def allocate_subscription_bonus(subscription_id: int) -> str:
    """
    Allocate the completion bonus if the subscription earned it.

    Safe to enqueue more than once: a second run finds the existing bonus
    payment and does nothing.

    Args:
        subscription_id: Subscription ID

    Returns:
        Allocation outcome
    """
    logger.info(
        "Starting bonus allocation",
        extra={"subscription_id": subscription_id},
    )
    outcome = run_async(_allocate_async(subscription_id))
    logger.info(
        f"Bonus allocation finished: {outcome}",
        extra={"subscription_id": subscription_id},
    )
    return outcome


async def _allocate_async(subscription_id: int) -> str:
    """Async implementation of bonus allocation."""
    engine = create_store_engine(StoreConfig.from_settings(settings))
    session_maker = create_session_maker(engine)
    try:
        async with session_maker() as session:
            result = await BonusAllocator(session).allocate(subscription_id)
            return result.outcome.value
    finally:
        await engine.dispose()
