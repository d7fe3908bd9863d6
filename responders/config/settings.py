"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Responder configuration settings.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "responders"
    app_version: str = "0.1.0"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_queue_size: int = 10_000  # Max pending ledger deliveries before dropping
    log_ledger_messages: bool = True  # False keeps ledger notifications out of the log

    # Observability
    metrics_prefix: str = "responders"

    # Responses
    default_page_size: int = 20
    # Prefix for domain-relative links. Empty = derive from the request URL.
    public_domain: str = ""
    codec_mime_type: str = "application/vnd.responders.encapsulated"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("log_queue_size", "default_page_size")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("public_domain")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (used by tests)."""
    get_settings.cache_clear()
