"""
Ledger error types
"""

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class FieldError:
    """One rejected input field"""
    field: str
    message: str


class LedgerError(Exception):
    """Base class for ledger failures"""


class ValidationError(LedgerError):
    """Input violates a ledger constraint; nothing was written"""

    def __init__(self, errors: Iterable[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))

    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


class NotFoundError(LedgerError):
    """Referenced transaction does not exist"""

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class StatusConflictError(LedgerError):
    """A conditional status write found the transaction in another status"""

    def __init__(self, transaction_id: int, expected_status: str, actual_status: str):
        self.transaction_id = transaction_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(
            f"Transaction {transaction_id} is '{actual_status}', expected '{expected_status}'"
        )
