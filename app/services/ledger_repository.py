"""
Ledger Repository
Storage for financial transactions behind a narrow append / list / update interface
"""

import itertools
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StatusConflictError
from app.models import FinancialTransaction as FinancialTransactionRow
from app.schemas.financial import FinancialTransaction


class TransactionRepository(Protocol):
    """Persistence contract consumed by the ledger engine"""

    async def append(self, fields: Dict[str, Any]) -> FinancialTransaction:
        ...

    async def get_by_id(self, transaction_id: int) -> Optional[FinancialTransaction]:
        ...

    async def list_by_patient(self, patient_id: int) -> List[FinancialTransaction]:
        ...

    async def update_by_id(
        self,
        transaction_id: int,
        changes: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[FinancialTransaction]:
        """
        Apply changes and return the new snapshot, or None for an unknown id.
        With expected_status set, the write only happens while the stored
        status still equals it; otherwise StatusConflictError is raised.
        """
        ...


class InMemoryTransactionRepository:
    """
    Process-local transaction log.

    Writes and id assignment are serialized by a lock. Reads copy the
    matching records under the same lock, so callers always fold over a
    consistent snapshot. Records are frozen; updates swap in a new copy.
    """

    def __init__(self) -> None:
        self._records: Dict[int, FinancialTransaction] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    async def append(self, fields: Dict[str, Any]) -> FinancialTransaction:
        with self._lock:
            record = FinancialTransaction(id=next(self._ids), **fields)
            self._records[record.id] = record
            return record

    async def get_by_id(self, transaction_id: int) -> Optional[FinancialTransaction]:
        with self._lock:
            return self._records.get(transaction_id)

    async def list_by_patient(self, patient_id: int) -> List[FinancialTransaction]:
        with self._lock:
            matches = [r for r in self._records.values() if r.patient_id == patient_id]
        return sorted(matches, key=lambda r: r.id, reverse=True)

    async def update_by_id(
        self,
        transaction_id: int,
        changes: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[FinancialTransaction]:
        with self._lock:
            current = self._records.get(transaction_id)
            if current is None:
                return None
            if expected_status is not None and current.status != expected_status:
                raise StatusConflictError(transaction_id, expected_status, current.status)
            updated = current.model_copy(update=changes)
            self._records[transaction_id] = updated
            return updated

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on round trip
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(row: FinancialTransactionRow) -> FinancialTransaction:
    record = FinancialTransaction.model_validate(row)
    return record.model_copy(update={
        "processed_at": _as_utc(record.processed_at),
        "created_at": _as_utc(record.created_at),
        "updated_at": _as_utc(record.updated_at),
    })


class SqlAlchemyTransactionRepository:
    """Transaction log stored in the financial_transactions table"""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, fields: Dict[str, Any]) -> FinancialTransaction:
        row = FinancialTransactionRow(**fields)
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return _to_record(row)

    async def get_by_id(self, transaction_id: int) -> Optional[FinancialTransaction]:
        row = await self.db.get(FinancialTransactionRow, transaction_id, populate_existing=True)
        return _to_record(row) if row is not None else None

    async def list_by_patient(self, patient_id: int) -> List[FinancialTransaction]:
        query = (
            select(FinancialTransactionRow)
            .filter(FinancialTransactionRow.patient_id == patient_id)
            .order_by(FinancialTransactionRow.id.desc())
        )
        result = await self.db.execute(query)
        return [_to_record(row) for row in result.scalars().all()]

    async def update_by_id(
        self,
        transaction_id: int,
        changes: Dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[FinancialTransaction]:
        # Single conditional UPDATE so a concurrent status change cannot be overwritten
        query = update(FinancialTransactionRow).where(FinancialTransactionRow.id == transaction_id)
        if expected_status is not None:
            query = query.where(FinancialTransactionRow.status == expected_status)
        query = query.values(**changes).execution_options(synchronize_session=False)

        result = await self.db.execute(query)
        await self.db.commit()

        row = await self.db.get(FinancialTransactionRow, transaction_id, populate_existing=True)
        if row is None:
            return None
        if result.rowcount == 0:
            raise StatusConflictError(transaction_id, expected_status, row.status)
        return _to_record(row)
