"""
Store configuration and engine factories.

The commission worker builds its engine from an explicit StoreConfig
instead of a module-level client, so every runner owns its connections.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from goldsave.config.constants import (
    STORE_TIMEOUT_SECONDS,
    TRANSACTION_TIMEOUT_SECONDS,
)


if TYPE_CHECKING:
    from goldsave.config.settings import Settings


@dataclass(frozen=True)
class StoreConfig:
    """Connection parameters for the persistent store."""

    database_url: str
    echo: bool = False
    store_timeout_seconds: float = STORE_TIMEOUT_SECONDS
    transaction_timeout_seconds: float = TRANSACTION_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls, settings: "Settings") -> "StoreConfig":
        """Build store config from application settings."""
        return cls(
            database_url=settings.database_url,
            echo=settings.database_echo,
            store_timeout_seconds=settings.store_timeout_seconds,
            transaction_timeout_seconds=settings.transaction_timeout_seconds,
        )

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")

    def connect_args(self) -> dict[str, Any]:
        """Driver-level timeouts so a hung query cannot outlive the worker."""
        if not self.is_postgres:
            return {}
        statement_timeout_ms = int(self.transaction_timeout_seconds * 1000)
        return {
            "timeout": self.store_timeout_seconds,
            "command_timeout": self.transaction_timeout_seconds,
            "server_settings": {
                "statement_timeout": str(statement_timeout_ms),
                "application_name": "goldsave-commission-worker",
            },
        }


def create_store_engine(config: StoreConfig) -> AsyncEngine:
    """Create engine for a worker (NullPool: no connections kept between cycles)."""
    engine = create_async_engine(
        config.database_url,
        echo=config.echo,
        poolclass=NullPool,
        connect_args=config.connect_args(),
    )
    if config.database_url.startswith("sqlite"):
        _enable_sqlite_savepoints(engine)
    return engine


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    # pysqlite emits its own BEGIN lazily, which breaks SAVEPOINT;
    # let SQLAlchemy control transaction boundaries instead
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to the worker engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
