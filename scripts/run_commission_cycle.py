#!/usr/bin/env python3
"""
Run one scheduled commission cycle.

Prints the cycle summary as JSON. Exits non-zero when the configuration
is invalid or the store is unreachable, so cron/systemd can alert.

Usage:
    python scripts/run_commission_cycle.py
    python scripts/run_commission_cycle.py --limit 10 --worker-id worker-a
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from goldsave.config.database import StoreConfig
from goldsave.config.settings import load_settings
from goldsave.services.commission.cycle_runner import CycleRunner, CycleSummary
from goldsave.utils.exceptions import FatalConfigurationError


async def run_cycle(limit: int | None, worker_id: str | None) -> CycleSummary:
    """Run one cycle with settings from the environment."""
    settings = load_settings()
    runner = CycleRunner(
        StoreConfig.from_settings(settings),
        worker_id=worker_id or settings.effective_worker_id,
        batch_limit=settings.commission_batch_limit,
        max_levels=settings.referral_max_depth,
    )
    try:
        return await runner.run_cycle(limit=limit)
    finally:
        await runner.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Process due scheduled referral commissions"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Max jobs to process (default: COMMISSION_BATCH_LIMIT)",
    )
    parser.add_argument(
        "--worker-id",
        default=None,
        help="Identity written to locked_by (default: host:pid:thread)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Log level for stderr output",
    )
    args = parser.parse_args()

    # Configure logger for script
    logger.remove()
    logger.add(sys.stderr, level=args.log_level)

    try:
        summary = asyncio.run(run_cycle(args.limit, args.worker_id))
    except FatalConfigurationError as e:
        logger.critical(f"Commission cycle aborted: {e.message}")
        sys.exit(1)

    print(json.dumps(summary.to_dict(), indent=2))


if __name__ == "__main__":
    main()
