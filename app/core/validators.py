"""
Ledger input validation utilities
"""

from typing import Dict, FrozenSet, Optional

from app.models import Currency, TransactionStatus, TransactionType


SUPPORTED_CURRENCY_CODES = frozenset(c.value for c in Currency)
TRANSACTION_TYPES = frozenset(t.value for t in TransactionType)
TRANSACTION_STATUSES = frozenset(s.value for s in TransactionStatus)

# Legal status changes; rewriting the current status is always allowed
STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    TransactionStatus.PENDING.value: frozenset({
        TransactionStatus.COMPLETED.value,
        TransactionStatus.CANCELLED.value,
    }),
    TransactionStatus.COMPLETED.value: frozenset({
        TransactionStatus.CANCELLED.value,
        TransactionStatus.REFUNDED.value,
    }),
    TransactionStatus.CANCELLED.value: frozenset(),
    TransactionStatus.REFUNDED.value: frozenset(),
}


def validate_description(description: Optional[str]) -> str:
    """
    Description must contain visible text
    """
    if description is None or not description.strip():
        raise ValueError('Description is required')
    return description


def validate_transaction_type(value: str) -> str:
    if value not in TRANSACTION_TYPES:
        raise ValueError(
            f"Unsupported transaction type '{value}'; expected one of {', '.join(sorted(TRANSACTION_TYPES))}"
        )
    return value


def validate_currency(value: str) -> str:
    """
    Only EUR, RSD and CHF are accepted; codes are case sensitive
    """
    if value not in SUPPORTED_CURRENCY_CODES:
        raise ValueError(
            f"Unsupported currency '{value}'; expected one of {', '.join(sorted(SUPPORTED_CURRENCY_CODES))}"
        )
    return value


def validate_status(value: str) -> str:
    if value not in TRANSACTION_STATUSES:
        raise ValueError(
            f"Unsupported status '{value}'; expected one of {', '.join(sorted(TRANSACTION_STATUSES))}"
        )
    return value


def validate_amount(amount, transaction_type: Optional[str]) -> int:
    """
    Validate a raw amount in the smallest currency unit.
    Payments, charges and refunds take a positive magnitude;
    adjustments take any non-zero signed value.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError('Amount must be an integer in the smallest currency unit')

    if transaction_type == TransactionType.ADJUSTMENT.value:
        if amount == 0:
            raise ValueError('Adjustment amount must be non-zero')
    elif amount <= 0:
        raise ValueError('Amount must be a positive number')

    return amount


def validate_status_transition(current: str, new: str) -> str:
    """
    Reject status changes outside the money-movement lifecycle:
    pending -> completed | cancelled, completed -> cancelled | refunded.
    cancelled and refunded are terminal.
    """
    if current == new:
        return new
    if new not in STATUS_TRANSITIONS.get(current, frozenset()):
        raise ValueError(f"Cannot change status from '{current}' to '{new}'")
    return new


def normalize_amount(amount: int, transaction_type: str) -> int:
    """Apply the ledger sign convention to a validated amount"""
    if transaction_type == TransactionType.PAYMENT.value:
        return -abs(amount)
    if transaction_type in (TransactionType.CHARGE.value, TransactionType.REFUND.value):
        return abs(amount)
    return amount
