"""
Ledger Service
Append-only patient transaction log with balances and summaries derived on read
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import FieldError, NotFoundError, StatusConflictError, ValidationError
from app.core.logging import LedgerAuditLogger, audit_logger
from app.core.validators import (
    normalize_amount,
    validate_amount,
    validate_currency,
    validate_description,
    validate_status,
    validate_status_transition,
    validate_transaction_type,
)
from app.models import TransactionStatus, TransactionType
from app.schemas.financial import (
    FinancialTransaction,
    PatientBalance,
    PatientFinancialSummary,
    TransactionCreate,
    TransactionUpdate,
)
from app.services.ledger_repository import TransactionRepository

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = frozenset({"status", "notes", "authorized_by"})
REFUNDABLE_TYPES = frozenset({TransactionType.PAYMENT.value, TransactionType.CHARGE.value})
OUTSTANDING_CATEGORY = "outstanding"
MAX_UPDATE_ATTEMPTS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _pydantic_errors(exc: PydanticValidationError) -> List[FieldError]:
    return [
        FieldError(".".join(str(part) for part in err["loc"]) or "body", err["msg"])
        for err in exc.errors()
    ]


def summarize_transactions(
    patient_id: int,
    transactions: List[FinancialTransaction],
) -> PatientFinancialSummary:
    """
    Fold a patient's transactions into per-currency totals.

    Only completed transactions count towards the totals. A currency shows up
    in every map once it has at least one completed transaction and never
    otherwise. transaction_count and last_transaction_date cover all statuses.
    """
    charges: Dict[str, int] = {}
    payments: Dict[str, int] = {}
    refunds: Dict[str, int] = {}
    balance: Dict[str, int] = {}

    for tx in transactions:
        if tx.status != TransactionStatus.COMPLETED.value:
            continue
        currency = tx.currency
        for totals in (charges, payments, refunds, balance):
            totals.setdefault(currency, 0)

        balance[currency] += tx.amount
        if tx.type == TransactionType.CHARGE.value:
            charges[currency] += tx.amount
        elif tx.type == TransactionType.PAYMENT.value:
            payments[currency] += abs(tx.amount)
        elif tx.type == TransactionType.REFUND.value:
            refunds[currency] += tx.amount

    latest = max(transactions, key=lambda tx: tx.id, default=None)

    return PatientFinancialSummary(
        patient_id=patient_id,
        total_charges=charges,
        total_payments=payments,
        total_refunds=refunds,
        balance=balance,
        last_transaction_date=latest.created_at if latest else None,
        transaction_count=len(transactions),
    )


class LedgerService:
    """
    Patient financial ledger.

    The repository is injected; the service keeps no state of its own and
    recomputes every balance from the stored log.
    """

    def __init__(
        self,
        repository: TransactionRepository,
        *,
        enforce_status_transitions: bool = True,
        validate_refund_link: bool = True,
        audit: Optional[LedgerAuditLogger] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.repository = repository
        self.enforce_status_transitions = enforce_status_transitions
        self.validate_refund_link = validate_refund_link
        self.audit = audit or audit_logger
        self.clock = clock

    def _reject(self, operation: str, errors: List[FieldError]) -> ValidationError:
        self.audit.log_validation_failed(
            operation, [{"field": e.field, "message": e.message} for e in errors]
        )
        return ValidationError(errors)

    # ==================== Writes ====================

    async def append_transaction(
        self,
        data: Union[TransactionCreate, Mapping[str, Any]],
    ) -> FinancialTransaction:
        """
        Validate, sign-normalize and store a new transaction.

        Raises ValidationError listing every rejected field; the log is
        left untouched on failure.
        """
        if not isinstance(data, TransactionCreate):
            try:
                data = TransactionCreate.model_validate(dict(data))
            except PydanticValidationError as exc:
                raise self._reject("append_transaction", _pydantic_errors(exc))

        errors: List[FieldError] = []
        checks = [
            ("description", lambda: validate_description(data.description)),
            ("type", lambda: validate_transaction_type(data.type)),
            ("currency", lambda: validate_currency(data.currency)),
            ("amount", lambda: validate_amount(data.amount, data.type)),
        ]
        if data.status is not None:
            checks.append(("status", lambda: validate_status(data.status)))

        for field, check in checks:
            try:
                check()
            except ValueError as exc:
                errors.append(FieldError(field, str(exc)))
        if errors:
            raise self._reject("append_transaction", errors)

        now = self.clock()
        fields = data.model_dump(exclude={"status"})
        fields.update(
            amount=normalize_amount(data.amount, data.type),
            status=data.status or TransactionStatus.COMPLETED.value,
            processed_at=now,
            created_at=now,
            updated_at=now,
        )

        transaction = await self.repository.append(fields)
        self.audit.log_transaction_recorded(transaction)
        return transaction

    async def update_transaction(
        self,
        transaction_id: int,
        updates: Union[TransactionUpdate, Mapping[str, Any]],
    ) -> FinancialTransaction:
        """
        Change status, notes or authorized_by of an existing transaction.

        Any other field is rejected. With transition enforcement on, status
        may only move pending -> completed | cancelled or
        completed -> cancelled | refunded.
        """
        if isinstance(updates, TransactionUpdate):
            changes = updates.model_dump(exclude_unset=True)
        else:
            immutable = sorted(set(updates) - MUTABLE_FIELDS)
            if immutable:
                raise self._reject("update_transaction", [
                    FieldError(field, "Field is immutable once recorded") for field in immutable
                ])
            try:
                changes = TransactionUpdate.model_validate(dict(updates)).model_dump(exclude_unset=True)
            except PydanticValidationError as exc:
                raise self._reject("update_transaction", _pydantic_errors(exc))

        if "status" in changes:
            try:
                validate_status(changes["status"])
            except (TypeError, ValueError) as exc:
                raise self._reject("update_transaction", [FieldError("status", str(exc))])
        guard_status = "status" in changes and self.enforce_status_transitions

        changes["updated_at"] = self.clock()
        # A conflicting write re-reads the transaction and checks the transition again
        for _ in range(MAX_UPDATE_ATTEMPTS):
            current = await self.repository.get_by_id(transaction_id)
            if current is None:
                raise NotFoundError(transaction_id)

            if guard_status:
                try:
                    validate_status_transition(current.status, changes["status"])
                except ValueError as exc:
                    raise self._reject("update_transaction", [FieldError("status", str(exc))])

            try:
                updated = await self.repository.update_by_id(
                    transaction_id,
                    changes,
                    expected_status=current.status if guard_status else None,
                )
            except StatusConflictError as exc:
                logger.info("Retrying update of transaction %s: %s", transaction_id, exc)
                continue
            if updated is None:
                raise NotFoundError(transaction_id)
            break
        else:
            raise self._reject("update_transaction", [
                FieldError("status", "Transaction status keeps changing; retry the update")
            ])

        self.audit.log_transaction_updated(
            updated,
            {k: v for k, v in changes.items() if k != "updated_at"},
            previous_status=current.status,
        )
        return updated

    # ==================== Reads ====================

    async def get_patient_transactions(self, patient_id: int) -> List[FinancialTransaction]:
        """All transactions for a patient, newest created first"""
        return await self.repository.list_by_patient(patient_id)

    async def get_patient_summary(self, patient_id: int) -> PatientFinancialSummary:
        transactions = await self.repository.list_by_patient(patient_id)
        return summarize_transactions(patient_id, transactions)

    async def get_patient_balance(self, patient_id: int) -> PatientBalance:
        summary = await self.get_patient_summary(patient_id)
        return PatientBalance(
            patient_id=patient_id,
            total_charges=summary.total_charges,
            total_payments=summary.total_payments,
            balance=summary.balance,
            last_updated=self.clock(),
        )

    # ==================== Convenience constructors ====================

    async def record_payment(
        self,
        patient_id: int,
        amount: int,
        currency: str,
        payment_method: str,
        description: str,
        *,
        recorded_by: int,
        **extra: Any,
    ) -> FinancialTransaction:
        """Record money received from the patient (stored negative)"""
        return await self.append_transaction({
            "patient_id": patient_id,
            "type": TransactionType.PAYMENT.value,
            "amount": amount,
            "currency": currency,
            "payment_method": payment_method,
            "description": description,
            "recorded_by": recorded_by,
            **extra,
        })

    async def record_charge(
        self,
        patient_id: int,
        amount: int,
        currency: str,
        description: str,
        category: Optional[str] = None,
        *,
        recorded_by: int,
        **extra: Any,
    ) -> FinancialTransaction:
        """Record an amount the patient owes (stored positive)"""
        return await self.append_transaction({
            "patient_id": patient_id,
            "type": TransactionType.CHARGE.value,
            "amount": amount,
            "currency": currency,
            "description": description,
            "category": category,
            "recorded_by": recorded_by,
            **extra,
        })

    async def record_refund(
        self,
        patient_id: int,
        amount: int,
        currency: str,
        original_transaction_id: int,
        reason: str,
        *,
        recorded_by: int,
        **extra: Any,
    ) -> FinancialTransaction:
        """
        Record money returned to the patient (stored positive).

        The original transaction id is kept in the notes. When refund linkage
        validation is on, the original must be a payment or charge of the
        same patient and currency.
        """
        if self.validate_refund_link:
            await self._check_refund_link(patient_id, currency, original_transaction_id)

        return await self.append_transaction({
            "patient_id": patient_id,
            "type": TransactionType.REFUND.value,
            "amount": amount,
            "currency": currency,
            "description": f"Refund: {reason}" if reason and reason.strip() else "",
            "notes": f"Original transaction ID: {original_transaction_id}",
            "recorded_by": recorded_by,
            **extra,
        })

    async def record_outstanding(
        self,
        patient_id: int,
        amount: int,
        currency: str,
        description: str,
        reason: Optional[str] = None,
        *,
        recorded_by: int,
        **extra: Any,
    ) -> FinancialTransaction:
        """Carry an outstanding balance onto the ledger as a categorized charge"""
        return await self.append_transaction({
            "patient_id": patient_id,
            "type": TransactionType.CHARGE.value,
            "amount": amount,
            "currency": currency,
            "description": description,
            "category": OUTSTANDING_CATEGORY,
            "notes": reason,
            "recorded_by": recorded_by,
            **extra,
        })

    async def _check_refund_link(self, patient_id: int, currency: str, original_transaction_id: int) -> None:
        original = await self.repository.get_by_id(original_transaction_id)
        problem = None
        if original is None:
            problem = f"Transaction {original_transaction_id} does not exist"
        elif original.patient_id != patient_id:
            problem = f"Transaction {original_transaction_id} belongs to another patient"
        elif original.type not in REFUNDABLE_TYPES:
            problem = f"Transaction {original_transaction_id} is a {original.type}, not a payment or charge"
        elif original.currency != currency:
            problem = f"Transaction {original_transaction_id} is in {original.currency}, not {currency}"

        if problem:
            logger.info("Refund rejected for patient %s: %s", patient_id, problem)
            raise self._reject("record_refund", [FieldError("original_transaction_id", problem)])
