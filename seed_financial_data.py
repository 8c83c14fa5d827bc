"""
Seed financial data for testing
"""
import asyncio
from sqlalchemy import select
from config import settings
from database import AsyncSessionLocal, init_db
from app.core.currency import format_currency, format_multi_currency_total, get_currency_name
from app.models import FinancialTransaction, PaymentMethod
from app.services.ledger_repository import SqlAlchemyTransactionRepository
from app.services.ledger_service import LedgerService

DEMO_PATIENT_ID = 1
DEMO_RECORDED_BY = settings.SEED_RECORDED_BY or 1


async def seed_financial_data():
    """Seed the database with a sample patient ledger"""
    await init_db()

    async with AsyncSessionLocal() as db:
        # Check if the demo patient already has transactions
        existing = await db.execute(
            select(FinancialTransaction).filter(FinancialTransaction.patient_id == DEMO_PATIENT_ID)
        )
        if existing.scalars().first():
            print("Ledger already seeded. Skipping seed.")
            return

        ledger = LedgerService(SqlAlchemyTransactionRepository(db))

        cleaning = await ledger.record_charge(
            DEMO_PATIENT_ID, 10000, "EUR", "Professional cleaning",
            category="hygiene", recorded_by=DEMO_RECORDED_BY,
        )
        await ledger.record_charge(
            DEMO_PATIENT_ID, 4500000, "RSD", "Composite filling 36",
            category="restorative", recorded_by=DEMO_RECORDED_BY,
        )
        payment = await ledger.record_payment(
            DEMO_PATIENT_ID, 10000, "EUR", PaymentMethod.CARD.value,
            "Card payment at reception", recorded_by=DEMO_RECORDED_BY,
        )
        await ledger.record_payment(
            DEMO_PATIENT_ID, 2000000, "RSD", PaymentMethod.CASH.value,
            "Partial cash payment", recorded_by=DEMO_RECORDED_BY,
        )
        await ledger.record_refund(
            DEMO_PATIENT_ID, 2500, "EUR", payment.id,
            "Cleaning discount applied after payment", recorded_by=DEMO_RECORDED_BY,
        )
        await ledger.record_outstanding(
            DEMO_PATIENT_ID, 8000, "CHF", "Balance carried over from previous clinic",
            reason="Imported from paper records", recorded_by=DEMO_RECORDED_BY,
        )

        summary = await ledger.get_patient_summary(DEMO_PATIENT_ID)
        print(f"✅ Created {summary.transaction_count} transactions for patient {DEMO_PATIENT_ID} "
              f"(first charge #{cleaning.id})")
        print(f"   Balance: {format_multi_currency_total(summary.balance)}")
        for currency, amount in sorted(summary.balance.items()):
            print(f"   - {get_currency_name(currency)}: {format_currency(amount, currency)}")

if __name__ == "__main__":
    asyncio.run(seed_financial_data())
