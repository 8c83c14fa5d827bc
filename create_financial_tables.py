import asyncio
from database import engine, init_db

async def create_financial_tables():
    """Create the financial_transactions table directly using SQLAlchemy"""
    await init_db(engine)
    print(f"✅ Financial tables created on {engine.url.render_as_string(hide_password=True)}")

if __name__ == "__main__":
    asyncio.run(create_financial_tables())
