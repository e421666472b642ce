"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

import os
import socket
import threading
from functools import lru_cache

from loguru import logger
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from goldsave.config.constants import (
    COMMISSION_BATCH_LIMIT,
    COMMISSION_CYCLE_TIME_LIMIT_MS,
    MAX_REFERRAL_LEVELS,
    STORE_TIMEOUT_SECONDS,
    TRANSACTION_TIMEOUT_SECONDS,
)
from goldsave.utils.exceptions import FatalConfigurationError


SUPPORTED_DRIVERS = ("postgresql+asyncpg", "sqlite+aiosqlite")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/worker.log"

    # Commission engine
    worker_id: str | None = Field(
        default=None,
        description="Identity written to locked_by; defaults to host:pid:thread",
    )
    commission_batch_limit: int = Field(
        default=COMMISSION_BATCH_LIMIT,
        ge=1,
        le=500,
        description="Maximum jobs fetched per cycle",
    )
    referral_max_depth: int = Field(
        default=MAX_REFERRAL_LEVELS,
        ge=1,
        le=MAX_REFERRAL_LEVELS,
        description="Upline levels paid per job",
    )
    store_timeout_seconds: float = Field(
        default=STORE_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for a single store round-trip",
    )
    transaction_timeout_seconds: float = Field(
        default=TRANSACTION_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for the whole payout transaction",
    )
    commission_cycle_time_limit_ms: int = Field(
        default=COMMISSION_CYCLE_TIME_LIMIT_MS,
        gt=0,
        description="Dramatiq time limit for one cycle",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Require an async driver the engine can use."""
        if not v.startswith(SUPPORTED_DRIVERS):
            raise ValueError(
                "DATABASE_URL must use an async driver: "
                + ", ".join(SUPPORTED_DRIVERS)
            )
        return v

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Validate production-specific requirements."""
        if self.environment == "production":
            if self.debug:
                raise ValueError(
                    "DEBUG must be False in production environment. "
                    "Set DEBUG=false in your .env file."
                )
            if self.database_url.startswith("sqlite"):
                logger.warning(
                    "DATABASE_URL points at SQLite in production. "
                    "Concurrent workers need PostgreSQL."
                )
        return self

    @property
    def effective_worker_id(self) -> str:
        """Worker identity, falling back to host:pid:thread."""
        if self.worker_id:
            return self.worker_id
        # dramatiq runs several worker threads per process
        return (
            f"{socket.gethostname()}:{os.getpid()}:{threading.get_ident()}"
        )


def load_settings() -> Settings:
    """
    Build settings from the environment.

    Raises:
        FatalConfigurationError: when required values are missing or invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        raise FatalConfigurationError(
            f"Invalid configuration: {e.error_count()} error(s): "
            + "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
        ) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings for entry points (workers, scripts)."""
    return load_settings()
