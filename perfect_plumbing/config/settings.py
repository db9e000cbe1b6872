"""
Application settings
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read .env by default (repo root). You can also export envs directly.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" or "text"
    FRONTEND_ORIGIN: str = "http://localhost:5173"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000
    DASHBOARD_WINDOW_DAYS: int = 7


@lru_cache()
def get_settings() -> Settings:
    return Settings()
