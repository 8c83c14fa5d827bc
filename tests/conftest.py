"""Shared fixtures for the ledger tests."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database import build_engine, init_db
from app.services.ledger_repository import (
    InMemoryTransactionRepository,
    SqlAlchemyTransactionRepository,
)
from app.services.ledger_service import LedgerService


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def repository() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def ledger(repository, clock) -> LedgerService:
    return LedgerService(repository, clock=clock)


@pytest.fixture
def permissive_ledger(repository, clock) -> LedgerService:
    """Ledger with the original permissive status and refund behaviour."""
    return LedgerService(
        repository,
        enforce_status_transitions=False,
        validate_refund_link=False,
        clock=clock,
    )


@pytest.fixture
async def session_factory(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sql_repository(db_session) -> SqlAlchemyTransactionRepository:
    return SqlAlchemyTransactionRepository(db_session)


@pytest.fixture
def client():
    from main import app
    from app.api.dependencies import get_ledger_service

    repository = InMemoryTransactionRepository()
    app.dependency_overrides[get_ledger_service] = lambda: LedgerService(repository)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
