from pydantic_settings import BaseSettings
from typing import Optional
import os

class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    APP_NAME: str = "DentalCare Ledger API"
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # Database Settings
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./dentalcare_ledger.db"
    )

    # Ledger Settings
    # "memory" keeps the transaction log in-process, "database" uses DATABASE_URL
    LEDGER_BACKEND: str = os.getenv("LEDGER_BACKEND", "memory")
    ENFORCE_STATUS_TRANSITIONS: bool = os.getenv("ENFORCE_STATUS_TRANSITIONS", "True").lower() == "true"
    VALIDATE_REFUND_LINK: bool = os.getenv("VALIDATE_REFUND_LINK", "True").lower() == "true"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings
    BACKEND_CORS_ORIGINS: str = os.getenv("BACKEND_CORS_ORIGINS", "http://localhost:3000")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    # Server Settings (optional)
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Seed data owner (employee id used by seed_financial_data.py)
    SEED_RECORDED_BY: Optional[int] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from .env

settings = Settings()
