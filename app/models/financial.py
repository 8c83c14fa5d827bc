"""
Financial ledger database models
"""

import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Index

from . import BaseModel


class TransactionType(str, enum.Enum):
    """Kinds of money movement recorded on a patient ledger"""
    PAYMENT = "payment"
    CHARGE = "charge"
    REFUND = "refund"
    ADJUSTMENT = "adjustment"


class TransactionStatus(str, enum.Enum):
    """Transaction status enumeration"""
    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class Currency(str, enum.Enum):
    """Supported currencies (never converted into each other)"""
    EUR = "EUR"
    RSD = "RSD"
    CHF = "CHF"


class PaymentMethod(str, enum.Enum):
    """Payment method enumeration"""
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    INSURANCE = "insurance"


class FinancialTransaction(BaseModel):
    """
    One recorded money movement for a patient.
    Amount is a signed integer in the currency's smallest unit:
    charges and refunds positive, payments negative, adjustments as given.
    """
    __tablename__ = "financial_transactions"

    patient_id = Column(Integer, nullable=False, index=True)
    type = Column(String(20), nullable=False)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default=Currency.EUR.value)

    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=True)
    payment_method = Column(String(50), nullable=True)
    transaction_reference = Column(String(100), nullable=True)
    appointment_id = Column(Integer, nullable=True)
    treatment_id = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    # Employee ids; resolved to names by the employee directory, not here
    recorded_by = Column(Integer, nullable=False)
    authorized_by = Column(Integer, nullable=True)

    status = Column(String(20), nullable=False, default=TransactionStatus.COMPLETED.value)
    processed_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return (
            f"<FinancialTransaction(id={self.id}, patient_id={self.patient_id}, "
            f"type='{self.type}', amount={self.amount} {self.currency})>"
        )


Index(
    "ix_financial_transactions_patient_created",
    FinancialTransaction.patient_id,
    FinancialTransaction.created_at,
)
