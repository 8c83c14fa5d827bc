"""
DentalCare Ledger Database Models
SQLAlchemy ORM models for the patient financial ledger
"""

from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.sql import func
from database import Base


# ==================== Base Model ====================

class BaseModel(Base):
    """Base model with common fields"""
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


# Import financial models
from app.models.financial import (  # noqa: E402
    FinancialTransaction, TransactionType, TransactionStatus, Currency, PaymentMethod
)

__all__ = [
    "Base",
    "BaseModel",
    "FinancialTransaction",
    "TransactionType",
    "TransactionStatus",
    "Currency",
    "PaymentMethod",
]
