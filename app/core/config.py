# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Env vars (.env):
      - DATABASE_URL (local storage; SQLite file by default)
      - COSMIC_BUCKET_SLUG, COSMIC_READ_KEY (catalog content API)

    Optional:
      - WALLET_STARTING_BALANCE / WALLET_CURRENCY (fresh wallet defaults)
      - SUBSCRIPTION_BLOCK_DAYS (length of one subscription month)
      - ACCESS_URL_BASE (prefix for generated access URLs)
    """

    PROJECT_NAME: str = "Prompt Storefront API"
    API_V1_STR: str = "/api/v1"

    # Local storage for the commerce ledger
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # Wallet
    WALLET_STARTING_BALANCE: float = 500000
    WALLET_CURRENCY: str = "VND"

    # Subscriptions are sold in fixed 30-day blocks, not calendar months
    SUBSCRIPTION_BLOCK_DAYS: int = 30

    ACCESS_URL_BASE: str = "https://api.promptos.com/access"

    # Cosmic content API (catalog)
    COSMIC_API_URL: str = "https://api.cosmicjs.com/v3"
    COSMIC_BUCKET_SLUG: str = ""
    COSMIC_READ_KEY: str = ""
    COSMIC_TIMEOUT_SECONDS: float = 10.0

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
