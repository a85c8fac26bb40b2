"""Application configuration via Pydantic Settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./partpicker.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # Redis page cache
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    PAGE_CACHE_TTL_SECONDS: int = 3600  # 1 hour revalidate window

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Cron trigger for the price refresh sweep. An empty string rejects every call.
    CRON_SECRET_KEY: str = ""

    # Scraping
    SCRAPER_TIMEOUT_SECONDS: float = 10.0
    DETAIL_TIMEOUT_SECONDS: float = 8.0
    DETAIL_FETCH_ENABLED: bool = True
    DETAIL_FETCH_CONCURRENCY: int = 5
    DEFAULT_RETAILER_LIMIT: int = 20

    # Persistence-first lookup thresholds
    SEARCH_STORE_THRESHOLD: int = 5
    BROWSE_STORE_THRESHOLD: int = 10

    # Shared builds
    BUILD_EXPIRY_DAYS: int = 30
    BUILD_SWEEP_INTERVAL_HOURS: int = 24

    # Price refresh sweep
    PRICE_REFRESH_ENABLED: bool = False
    PRICE_REFRESH_INTERVAL_HOURS: int = 24
    PRICE_REFRESH_RPM: int = 20

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"


settings = Settings()
