#!/usr/bin/env python3
"""
Inspect and reset failed commission jobs.

Failed jobs are never retried automatically. After fixing the cause
(plan configuration, referral data), put them back in the queue here.

Usage:
    python scripts/reset_failed_commissions.py --list
    python scripts/reset_failed_commissions.py 12 15 18
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from goldsave.config.database import (
    StoreConfig,
    create_session_maker,
    create_store_engine,
)
from goldsave.config.settings import load_settings
from goldsave.services.commission.job_admin import CommissionJobAdmin
from goldsave.utils.exceptions import FatalConfigurationError

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def reset_failed(job_ids: list[int], list_only: bool, limit: int) -> int:
    """
    List failed jobs or reset the given ones.

    Returns:
        Number of jobs that could not be reset
    """
    settings = load_settings()
    engine = create_store_engine(StoreConfig.from_settings(settings))
    session_maker = create_session_maker(engine)

    not_reset = 0
    try:
        async with session_maker() as session:
            admin = CommissionJobAdmin(session)

            if list_only:
                jobs = await admin.list_failed(limit)
                if not jobs:
                    logger.info("No failed commission jobs")
                for job in jobs:
                    logger.info(
                        f"#{job.id} scheduled_for={job.scheduled_for} "
                        f"attempts={job.attempts} last_error={job.last_error!r}"
                    )
                return 0

            for job_id in job_ids:
                if await admin.reset_failed(job_id):
                    logger.success(f"Job #{job_id} reset to pending")
                else:
                    not_reset += 1
    finally:
        await engine.dispose()

    return not_reset


def main() -> None:
    parser = argparse.ArgumentParser(
        description="List or reset failed scheduled commission jobs"
    )
    parser.add_argument(
        "job_ids",
        nargs="*",
        type=int,
        help="IDs of failed jobs to put back to pending",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List failed jobs instead of resetting",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Max jobs to list",
    )
    args = parser.parse_args()

    if not args.list and not args.job_ids:
        print("Please specify --list or one or more job IDs")
        print("Example: python scripts/reset_failed_commissions.py --list")
        sys.exit(1)

    try:
        not_reset = asyncio.run(
            reset_failed(args.job_ids, args.list, args.limit)
        )
    except FatalConfigurationError as e:
        logger.critical(e.message)
        sys.exit(1)

    if not_reset:
        sys.exit(2)


if __name__ == "__main__":
    main()
