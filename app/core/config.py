"""
Environment-driven settings for the messaging service.

Every value can be overridden by an upper-case environment variable of the
same name (or a `.env` file), e.g. `PAGE_SIZE=20` or `SCHEDULER_ENABLED=false`.
"""
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Workspace Messaging Service")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Session tokens and passwords are stored as HMAC digests under this key
    secret_key: str = Field(default=DEFAULT_SECRET_KEY)
    password_min_length: int = Field(default=6, ge=1)

    database_url: str = Field(default="sqlite:///./data/workspace.db")

    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    page_size: int = Field(default=50, ge=1)
    message_max_length: int = Field(default=1000, ge=1)
    tag_preview_length: int = Field(default=20, ge=0)
    channel_name_max_length: int = Field(default=20, ge=1)

    scheduler_enabled: bool = Field(default=True)
    scheduler_misfire_grace_seconds: int = Field(default=3600, ge=1)

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return value

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_secret_key_configured(self) -> bool:
        return bool(self.secret_key) and self.secret_key != DEFAULT_SECRET_KEY


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
