"""
Commission cycle task.

Runs one scheduled commission cycle for this worker. Invoked by an
external scheduler (cron, dramatiq-crontab or similar); several workers
may run it concurrently, coordination happens in the store.
"""

import dramatiq
from loguru import logger

from goldsave.services.commission.cycle_runner import CycleRunner
from goldsave.utils.exceptions import FatalConfigurationError
from jobs.async_runner import run_async
from jobs.broker import settings


# Failed jobs stay failed until reset explicitly; never retry the actor
@dramatiq.actor(
    max_retries=0, time_limit=settings.commission_cycle_time_limit_ms
)
def run_commission_cycle(limit: int | None = None) -> dict:
    """
    Process due commission jobs.

    Args:
        limit: Max jobs for this cycle (defaults to configured batch limit)

    Returns:
        Cycle summary as a dict
    """
    logger.info("Starting commission cycle...")

    try:
        summary = run_async(_run_commission_cycle_async(limit))
    except FatalConfigurationError as e:
        logger.critical(f"Commission cycle aborted: {e.message}")
        raise

    logger.info(
        f"Commission cycle complete: processed={summary['processed']}, "
        f"failed={summary['failed']}, skipped={summary['skipped']}"
    )
    return summary


async def _run_commission_cycle_async(limit: int | None) -> dict:
    """Async implementation of one commission cycle."""
    runner = CycleRunner.from_settings(settings)
    try:
        summary = await runner.run_cycle(limit=limit)
        return summary.to_dict()
    finally:
        await runner.dispose()
