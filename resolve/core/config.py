from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Resolve"
    debug: bool = False

    # API
    frontend_url: str = "http://localhost:3000"

    # Storage
    storage_backend: Literal["redis", "file", "memory"] = "redis"  # env: STORAGE_BACKEND
    redis_url: str = "redis://localhost:6379"
    storage_key: str = "resolve_decision_logs"
    storage_path: Path = Path("resolve_decision_logs.json")  # used when storage_backend=file

    # Free tier
    free_tier_limit: int = 3

    # Reminders
    reminder_delay_days: int = 7


@lru_cache
def get_settings() -> Settings:
    return Settings()
