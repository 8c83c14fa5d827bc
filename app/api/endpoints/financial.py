"""
Financial ledger API endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_ledger_service
from app.core.exceptions import NotFoundError
from app.schemas.financial import (
    ChargeCreate,
    FinancialTransaction,
    OutstandingCreate,
    PatientBalance,
    PatientFinancialSummary,
    PaymentCreate,
    RefundCreate,
    TransactionCreate,
    TransactionUpdate,
)
from app.services.ledger_service import LedgerService

router = APIRouter(tags=["Financial"])


# ==================== Transactions ====================

@router.post(
    "/financial-transactions",
    response_model=FinancialTransaction,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    transaction: TransactionCreate,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """
    Append a transaction to a patient's ledger.
    The amount sign is normalized from the transaction type.
    """
    return await ledger.append_transaction(transaction)


@router.patch("/financial-transactions/{transaction_id}", response_model=FinancialTransaction)
async def update_transaction(
    transaction_id: int,
    updates: TransactionUpdate,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """
    Update status, notes or authorizer of a transaction.
    All other fields are immutable.
    """
    try:
        return await ledger.update_transaction(transaction_id, updates)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc)
        )


# ==================== Patient views ====================

@router.get("/patients/{patient_id}/transactions", response_model=List[FinancialTransaction])
async def get_patient_transactions(
    patient_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Get all transactions of a patient, newest first"""
    return await ledger.get_patient_transactions(patient_id)


@router.get("/patients/{patient_id}/financial-summary", response_model=PatientFinancialSummary)
async def get_patient_financial_summary(
    patient_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Per-currency totals and balance over completed transactions"""
    return await ledger.get_patient_summary(patient_id)


@router.get("/patients/{patient_id}/balance", response_model=PatientBalance)
async def get_patient_balance(
    patient_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
):
    return await ledger.get_patient_balance(patient_id)


# ==================== Quick actions ====================

@router.post(
    "/patients/{patient_id}/payments",
    response_model=FinancialTransaction,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    patient_id: int,
    payment: PaymentCreate,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Record a payment received from the patient"""
    data = payment.model_dump(exclude_none=True)
    return await ledger.record_payment(
        patient_id,
        data.pop("amount"),
        data.pop("currency"),
        data.pop("payment_method"),
        data.pop("description"),
        **data,
    )


@router.post(
    "/patients/{patient_id}/charges",
    response_model=FinancialTransaction,
    status_code=status.HTTP_201_CREATED,
)
async def record_charge(
    patient_id: int,
    charge: ChargeCreate,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Record a charge for a treatment or service"""
    data = charge.model_dump(exclude_none=True)
    return await ledger.record_charge(
        patient_id,
        data.pop("amount"),
        data.pop("currency"),
        data.pop("description"),
        data.pop("category", None),
        **data,
    )


@router.post(
    "/patients/{patient_id}/refunds",
    response_model=FinancialTransaction,
    status_code=status.HTTP_201_CREATED,
)
async def record_refund(
    patient_id: int,
    refund: RefundCreate,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Record a refund referencing the original transaction"""
    data = refund.model_dump(exclude_none=True)
    return await ledger.record_refund(
        patient_id,
        data.pop("amount"),
        data.pop("currency"),
        data.pop("original_transaction_id"),
        data.pop("reason"),
        **data,
    )


@router.post(
    "/patients/{patient_id}/outstanding",
    response_model=FinancialTransaction,
    status_code=status.HTTP_201_CREATED,
)
async def record_outstanding(
    patient_id: int,
    outstanding: OutstandingCreate,
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Carry an outstanding balance onto the patient's ledger"""
    data = outstanding.model_dump(exclude_none=True)
    return await ledger.record_outstanding(
        patient_id,
        data.pop("amount"),
        data.pop("currency"),
        data.pop("description"),
        data.pop("reason", None),
        **data,
    )
