# app/config.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENV: str = "dev"
    APP_NAME: str = "Meeting Scheduler"

    # DB URL – for now SQLite local
    DATABASE_URL: str = "sqlite:///./app.db"

    LOG_LEVEL: str = "INFO"

    # Slot search
    SLOT_INCREMENT_MINUTES: int = 30
    MAX_SUGGESTIONS: int = 5
    DEFAULT_TIMEZONE: str = "UTC"
    # Upper bound on latest - earliest start of one search request
    MAX_SEARCH_DAYS: int = 31

    # When True a participant's buffer time widens the conflict check itself,
    # not just the score bonus.
    ENFORCE_BUFFER_TIME: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
