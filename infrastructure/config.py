"""Application settings"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from the environment and an optional .env file"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    APP_NAME: str = "Hotel Booking API"

    # -----------------------
    # Auth
    # -----------------------
    JWT_SECRET: str = "luxstay-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # -----------------------
    # HTTP
    # -----------------------
    FRONTEND_URL: Optional[str] = "http://localhost:5173"

    LOG_LEVEL: str = "INFO"
    SEED_DEMO_DATA: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
