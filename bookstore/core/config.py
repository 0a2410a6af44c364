# bookstore/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres or SQLite connection string)

    Optional:
      - AUTH_JWT_SECRET (enables Bearer token principals)
      - BANKING_* (bank transfer QR payload for Banking checkouts)
    """

    PROJECT_NAME: str = "Bookstore API"
    API_PREFIX: str = "/api"

    # Runtime
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # DB config
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
    ]

    # Token verification (optional, legacy userId is used when unset)
    AUTH_JWT_SECRET: str | None = None
    AUTH_JWT_ALG: str = "HS256"

    # Bank transfer QR payload
    BANKING_QR_BASE_URL: str = "https://qr.bookstore.local/generate"
    BANKING_ACCOUNT_INFO: str = "Nguyen Van A - 123456789 - ABC Bank"
    BANKING_TRANSFER_PREFIX: str = "BOOK"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
