"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./event_capacity.db"
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"
    EVENT_LOCK_TIMEOUT_SECONDS: float = 10.0
    REPORTING_TIMEZONE: str = "UTC"  # IANA tz

    class Config:
        env_file = ".env"


settings = Settings()
