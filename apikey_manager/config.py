"""
API Key Manager Configuration

Transport-level settings with environment variable support.
The key lifecycle core reads none of these.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "API Key Manager"
    app_version: str = "1.0.0"
    debug: bool = False

    host: str = "127.0.0.1"
    port: int = 8080

    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:8080"])

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
