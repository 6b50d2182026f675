# backend/config/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from functools import lru_cache


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "Restaurant Admin Backend"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Remote restaurant API
    REMOTE_API_URL: str = "http://localhost:5000/api"
    REMOTE_API_TIMEOUT: float = 15.0

    # JWT Settings (tokens are issued by the remote API, verified here)
    JWT_SECRET_KEY: str = "jwt-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"

    # Locale Settings
    DEFAULT_TIMEZONE: str = "Asia/Dhaka"
    CURRENCY_SYMBOL: str = "৳"

    # Printing
    PRINTING_ENABLED: bool = True
    PRINT_SPOOL_DIRECTORY: str = "data/print_spool"
    PRINT_SPOOL_TTL_SECONDS: int = 300
    RECEIPT_WIDTH_MM: int = 72
    INVOICE_RECEIPT_WIDTH_MM: int = 80

    # Exports
    PDF_FONT_PATH: Optional[str] = None

    # Pagination Settings
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Wizard
    WIZARD_DEFAULT_TABLE_COUNT: int = 5
    WIZARD_SESSION_TTL_SECONDS: int = 3600

    # CORS Settings
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_DIRECTORY: str = "logs"
    LOG_FILE: str = "logs/app.log"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
