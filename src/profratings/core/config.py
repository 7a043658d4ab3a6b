"""
Configuration management for the ProfRatings backend.
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "ProfRatings"
    debug: bool = False
    version: str = "1.0.0"

    # Key-value store
    kv_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379"
    professors_namespace: str = "professors"
    users_namespace: str = "users"
    processing_queue_namespace: str = "processing_queue"

    # Logging
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Search
    name_match_threshold: float = 80.0
    card_height_rem: float = 10.0
    root_font_size: float = 16.0
    overscan: int = 5

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    model_config = SettingsConfigDict(
        env_prefix="PROFRATINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
