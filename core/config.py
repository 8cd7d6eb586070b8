"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from SKILLINK_* environment variables."""

    app_name: str = "SkilLink API"
    debug: bool = False
    log_level: str = "INFO"

    # Credits granted on first credit-related access
    signup_credits: int = 100

    # Session length used when a booking request omits duration (minutes)
    default_session_minutes: int = 60

    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = SettingsConfigDict(env_prefix="SKILLINK_", env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
