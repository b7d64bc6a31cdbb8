"""
Configuration loaded from environment variables or a .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "Availit"
    # Also enables SQL echo and DEBUG logging
    DEBUG: bool = False

    # SQLite by default; any SQLAlchemy URL works (e.g. postgresql+psycopg://...)
    DATABASE_URL: str = "sqlite:///./availit.db"
    # Seconds to wait on a locked SQLite file / connect timeout elsewhere
    DB_CONNECT_TIMEOUT: int = 30
    DB_POOL_PRE_PING: bool = True

    # "sql" uses DATABASE_URL, "memory" keeps records in process
    STORE_BACKEND: Literal["sql", "memory"] = "sql"

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 2000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
