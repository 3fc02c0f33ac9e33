"""
Application configuration.
Settings are read from environment variables and the .env file.
"""
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from texawave.exceptions import ConfigurationError

ROOT_DIR = Path(__file__).resolve().parent.parent
load_dotenv(ROOT_DIR / ".env")

DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(extra="ignore")

    APP_NAME: str = "TexaWave ERP"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # MongoDB
    MONGO_URL: str = "mongodb://localhost:27017"
    DB_NAME: str = "texawave_erp"

    # JWT
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_FILE: str = ""

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    RECURRING_INVOICE_HOUR: int = 1

    # Business defaults
    DEFAULT_CURRENCY: str = "INR"
    DEFAULT_CGST_PERCENT: float = 9.0
    DEFAULT_SGST_PERCENT: float = 9.0
    DEFAULT_IGST_PERCENT: float = 18.0
    INVOICE_DUE_DAYS: int = 30

    # Feature flags
    FEATURE_RECURRING_INVOICES: bool = True
    FEATURE_EXCEL_EXPORT: bool = True


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


def validate_settings(current: Settings) -> None:
    """
    Refuse to start a production deployment with unsafe settings.

    Raises:
        ConfigurationError: If the JWT secret is still the default
    """
    if current.ENVIRONMENT == "production" and current.SECRET_KEY == DEFAULT_SECRET_KEY:
        raise ConfigurationError("SECRET_KEY must be set in production")


settings = get_settings()

FEATURES: Dict[str, bool] = {
    "recurring_invoices": settings.FEATURE_RECURRING_INVOICES,
    "excel_export": settings.FEATURE_EXCEL_EXPORT,
}
