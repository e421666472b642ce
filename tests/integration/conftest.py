"""
Fixtures for integration tests.

Each test gets a fresh SQLite database file (through aiosqlite) with
the full schema.
"""

from datetime import timedelta

import pytest
import pytest_asyncio

from goldsave.config.database import (
    StoreConfig,
    create_session_maker,
    create_store_engine,
)
from goldsave.models import Base

from .store import SUBSCRIBER_ID, TODAY, UPLINE_IDS, StoreSeeder


@pytest.fixture
def store_config(tmp_path):
    """Store config pointing at a per-test database file."""
    return StoreConfig(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'goldsave.db'}",
        store_timeout_seconds=5.0,
        transaction_timeout_seconds=10.0,
    )


@pytest_asyncio.fixture
async def engine(store_config):
    """Engine with all tables created."""
    engine = create_store_engine(store_config)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest.fixture
def seed(session_maker):
    return StoreSeeder(session_maker)


@pytest_asyncio.fixture
async def scenario(seed, commission_table):
    """Subscriber S with upline A <- B <- C and a completed month-1 payment."""
    await seed.chain(SUBSCRIBER_ID, *UPLINE_IDS)
    plan = await seed.plan(commission_monthly=commission_table)
    subscription = await seed.subscription(plan)
    payment = await seed.payment(subscription, month_number=1)
    job = await seed.job(payment, scheduled_for=TODAY - timedelta(days=1))
    return {
        "plan": plan,
        "subscription": subscription,
        "payment": payment,
        "job": job,
    }
