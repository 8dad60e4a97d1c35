from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./movie_scripts.db"
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    # Search
    SEARCH_CASE_SENSITIVE: bool = True

    # Add the title column to databases created before titles existed
    UPGRADE_LEGACY_SCHEMA: bool = False

    # Export / import documents
    TEXT_ENCODING: str = "utf-8"

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    class Config:
        env_file = ".env"

@lru_cache
def get_settings():
    return Settings()
