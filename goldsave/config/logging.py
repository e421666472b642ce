"""
Logging configuration.

Configures loguru sinks for workers and scripts.
Sets up log rotation and retention policies.
"""

import sys

from loguru import logger


def setup_logging(
    level: str = "INFO",
    log_file: str | None = "logs/worker.log",
) -> None:
    """Configure logger with stderr output and file rotation."""
    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )

    logger.info("Starting gold savings commission worker...")
