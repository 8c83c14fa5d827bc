"""
Financial ledger Pydantic schemas
"""

from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt

from app.models import TransactionStatus


# ==================== Transactions ====================

class TransactionCreate(BaseModel):
    """
    Schema for appending a transaction.
    type, currency and status stay plain strings: the ledger engine owns
    those rules and reports them as field-level validation errors.
    """
    patient_id: int = Field(..., description="Owning patient ID")
    type: str = Field(..., description="payment | charge | refund | adjustment")
    amount: StrictInt = Field(..., description="Unsigned magnitude in the smallest currency unit (signed for adjustments)")
    currency: str = Field(..., description="EUR | RSD | CHF")
    description: str = Field(..., description="Human readable description")
    recorded_by: int = Field(..., description="Employee ID recording the transaction")
    category: Optional[str] = Field(None, max_length=50)
    payment_method: Optional[str] = Field(None, max_length=50)
    transaction_reference: Optional[str] = Field(None, max_length=100)
    appointment_id: Optional[int] = None
    treatment_id: Optional[int] = None
    authorized_by: Optional[int] = None
    notes: Optional[str] = None
    status: Optional[str] = Field(None, description="Defaults to completed")


class TransactionUpdate(BaseModel):
    """Schema for updating a transaction; every other field is immutable"""
    model_config = ConfigDict(extra="forbid")

    status: Optional[str] = None
    notes: Optional[str] = None
    authorized_by: Optional[int] = None


class FinancialTransaction(BaseModel):
    """Immutable snapshot of a stored transaction"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    patient_id: int
    type: str
    amount: int
    currency: str
    description: str
    category: Optional[str] = None
    payment_method: Optional[str] = None
    transaction_reference: Optional[str] = None
    appointment_id: Optional[int] = None
    treatment_id: Optional[int] = None
    recorded_by: int
    authorized_by: Optional[int] = None
    status: str = TransactionStatus.COMPLETED.value
    notes: Optional[str] = None
    processed_at: datetime
    created_at: datetime
    updated_at: Optional[datetime] = None


# ==================== Convenience constructors ====================

class PaymentCreate(BaseModel):
    """Schema for recording a patient payment"""
    amount: StrictInt = Field(..., description="Amount paid (positive)")
    currency: str
    payment_method: str = Field(..., max_length=50)
    description: str
    recorded_by: int
    appointment_id: Optional[int] = None
    treatment_id: Optional[int] = None
    notes: Optional[str] = None


class ChargeCreate(BaseModel):
    """Schema for recording a charge"""
    amount: StrictInt = Field(..., description="Amount charged (positive)")
    currency: str
    description: str
    recorded_by: int
    category: Optional[str] = Field(None, max_length=50)
    appointment_id: Optional[int] = None
    treatment_id: Optional[int] = None
    notes: Optional[str] = None


class RefundCreate(BaseModel):
    """Schema for recording a refund against an earlier transaction"""
    amount: StrictInt = Field(..., description="Amount refunded (positive)")
    currency: str
    original_transaction_id: int
    reason: str
    recorded_by: int
    payment_method: Optional[str] = Field(None, max_length=50)


class OutstandingCreate(BaseModel):
    """Schema for recording an outstanding balance carried onto the ledger"""
    amount: StrictInt
    currency: str
    description: str
    recorded_by: int
    reason: Optional[str] = None
    appointment_id: Optional[int] = None
    treatment_id: Optional[int] = None


# ==================== Summaries ====================

class PatientFinancialSummary(BaseModel):
    """Per-currency totals derived from a patient's completed transactions"""
    model_config = ConfigDict(frozen=True)

    patient_id: int
    total_charges: Dict[str, int] = Field(default_factory=dict)
    total_payments: Dict[str, int] = Field(default_factory=dict)
    total_refunds: Dict[str, int] = Field(default_factory=dict)
    balance: Dict[str, int] = Field(default_factory=dict)
    last_transaction_date: Optional[datetime] = None
    transaction_count: int = 0


class PatientBalance(BaseModel):
    """Compact balance view"""
    patient_id: int
    total_charges: Dict[str, int]
    total_payments: Dict[str, int]
    balance: Dict[str, int]
    last_updated: datetime
