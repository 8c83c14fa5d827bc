"""
FastAPI dependencies wiring the ledger service to its repository
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from app.services.ledger_repository import (
    InMemoryTransactionRepository,
    SqlAlchemyTransactionRepository,
    TransactionRepository,
)
from app.services.ledger_service import LedgerService


def get_memory_repository(request: Request) -> InMemoryTransactionRepository:
    """The process-wide in-memory log lives on app.state"""
    repository = getattr(request.app.state, "ledger_repository", None)
    if repository is None:
        repository = InMemoryTransactionRepository()
        request.app.state.ledger_repository = repository
    return repository


def build_ledger_service(repository: TransactionRepository) -> LedgerService:
    return LedgerService(
        repository,
        enforce_status_transitions=settings.ENFORCE_STATUS_TRANSITIONS,
        validate_refund_link=settings.VALIDATE_REFUND_LINK,
    )


def get_memory_ledger_service(request: Request) -> LedgerService:
    return build_ledger_service(get_memory_repository(request))


async def get_database_ledger_service(db: AsyncSession = Depends(get_db)) -> LedgerService:
    """Ledger over a request-scoped session; get_db rolls back on errors"""
    return build_ledger_service(SqlAlchemyTransactionRepository(db))


# Dependency providing a LedgerService for the configured backend
# Usage in FastAPI routes:
#     async def my_route(ledger: LedgerService = Depends(get_ledger_service)):
get_ledger_service = (
    get_database_ledger_service
    if settings.LEDGER_BACKEND == "database"
    else get_memory_ledger_service
)
