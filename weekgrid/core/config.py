"""
Application configuration using Pydantic Settings.

Infrastructure and scheduling defaults are read from the environment (or `.env`).
The user's weekly availability lives in the persisted ScheduleConfig instead.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:5173"]
    )

    # ===========================================
    # Schedule config storage
    # ===========================================
    # JSON file holding availability windows and project roles
    CONFIG_PATH: str = "./data/config.json"

    # ===========================================
    # Scheduler
    # ===========================================
    DEFAULT_SCHEDULE_WEEKS: int = 2
    MAX_ESTIMATE_WEEKS: int = 52
    # Reject unknown or cyclic task dependencies instead of ignoring them
    STRICT_DEPENDENCIES: bool = False

    # ===========================================
    # Calendar hand-off
    # ===========================================
    CALENDAR_ID: str = "primary"
    CALENDAR_TIMEZONE: str = "Asia/Seoul"

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
