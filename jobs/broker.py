"""
Dramatiq broker configuration.

Redis-based message broker for commission and bonus tasks.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import CurrentMessage, ShutdownNotifications
from loguru import logger

from goldsave.config.logging import setup_logging
from goldsave.config.settings import get_settings


settings = get_settings()
setup_logging(settings.log_level, settings.log_file)

# Initialize Redis broker with graceful shutdown middleware
redis_broker = RedisBroker(
    host=settings.redis_host,
    port=settings.redis_port,
    password=settings.redis_password if settings.redis_password else None,
    db=settings.redis_db,
)

# ShutdownNotifications: Allows workers to gracefully shutdown
# CurrentMessage: Provides access to current message in actors
# Retries stays at dramatiq's default; commission actors opt out per actor
redis_broker.add_middleware(ShutdownNotifications())
redis_broker.add_middleware(CurrentMessage())

# Set as default broker
dramatiq.set_broker(redis_broker)

# Export broker
broker = redis_broker

logger.info(
    f"Dramatiq broker initialized: "
    f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"
)
