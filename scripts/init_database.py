#!/usr/bin/env python3
"""Initialize database tables (development; production uses alembic)."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from goldsave.config.database import StoreConfig, create_store_engine
from goldsave.config.settings import load_settings
from goldsave.models import Base
from goldsave.utils.exceptions import FatalConfigurationError

# Configure logger for script
logger.remove()
logger.add(sys.stderr, level="INFO")


async def init_database() -> None:
    """Create all database tables."""
    try:
        settings = load_settings()
    except FatalConfigurationError as e:
        logger.error(e.message)
        sys.exit(1)

    logger.info("Connecting to database...")
    engine = create_store_engine(StoreConfig.from_settings(settings))

    async with engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(
            Base.metadata.create_all,
            checkfirst=True
        )

    await engine.dispose()
    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
