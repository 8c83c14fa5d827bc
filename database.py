from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
import os
from dotenv import load_dotenv
import logging

load_dotenv()

# Get database URL from environment variable
# CRITICAL: Never hardcode production credentials. Always use environment variables.
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite+aiosqlite:///./dentalcare_ledger.db"  # Default for local development only
)

# Determine if we should echo SQL queries (only in development)
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DEBUG = os.getenv("DEBUG", "False").lower() == "true"
ECHO_SQL = (ENVIRONMENT == "development" and DEBUG)

# Connection pool configuration (ignored for SQLite, which has no server pool)
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))  # Number of connections to maintain
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "20"))  # Additional connections beyond pool_size
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))  # Seconds to wait for a connection
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))  # Recycle connections after 1 hour
POOL_PRE_PING = os.getenv("DB_POOL_PRE_PING", "True").lower() == "true"  # Test connections before using

logger = logging.getLogger(__name__)


def build_engine(url: str = DATABASE_URL):
    """Create the async engine, applying pool settings only to server databases"""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=ECHO_SQL, future=True)
    return create_async_engine(
        url,
        echo=ECHO_SQL,  # Only echo SQL in development
        future=True,
        pool_pre_ping=POOL_PRE_PING,  # Test connections before using them
        pool_size=POOL_SIZE,  # Number of connections to maintain
        max_overflow=MAX_OVERFLOW,  # Additional connections beyond pool_size
        pool_timeout=POOL_TIMEOUT,  # Seconds to wait for a connection
        pool_recycle=POOL_RECYCLE,  # Recycle connections after this many seconds
    )


try:
    engine = build_engine()
    logger.info(f"Database engine created for {engine.url.get_backend_name()}")
except Exception as e:
    logger.error(f"Failed to create database engine: {e}", exc_info=True)
    raise

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def init_db(bind=None) -> None:
    """Create all ledger tables on the given engine (defaults to the app engine)"""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Dependency for FastAPI routes
async def get_db():
    """
    Dependency function to get database session
    Usage in FastAPI routes:
        async def my_route(db: AsyncSession = Depends(get_db)):
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            # Log database errors for debugging
            logger.error(f"Database error in session: {str(e)}", exc_info=True)
            raise
        finally:
            await session.close()

