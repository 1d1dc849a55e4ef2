"""Cascata settings

Loads configuration from environment variables (.env supported) using pydantic-settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # Core
    database_url: str = Field("sqlite:///./cascata.db", alias="DATABASE_URL")
    timezone: str = Field("America/New_York", alias="TIMEZONE")

    # CORS (comma-separated list; '*' allows all - dev only)
    cors_origins: str = Field("*", alias="CORS_ORIGINS")

    # Nightly forecast recalculation
    scheduler_enabled: bool = Field(True, alias="SCHEDULER_ENABLED")
    recalc_hour: int = Field(2, alias="RECALC_HOUR")
    recalc_minute: int = Field(30, alias="RECALC_MINUTE")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"


settings = Settings()
