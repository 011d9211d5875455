from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .defaults import (
    LOG_FORMATS,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_MAX_INTERVAL_MILLIS,
    DEFAULT_MAX_RETRIES,
)


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    connect_timeout_millis: int = 0
    read_timeout_millis: int = 0

    retry_enabled: bool = True
    retry_max_retries: int = DEFAULT_MAX_RETRIES
    retry_status_codes: List[int] = []
    retry_max_interval_millis: int = DEFAULT_MAX_INTERVAL_MILLIS
    retry_backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER

    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("connect_timeout_millis", "read_timeout_millis")
    @classmethod
    def _validate_timeout(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Timeouts must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        valid = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {valid}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def _validate_format(cls, v: str) -> str:
        if v.lower() not in LOG_FORMATS:
            raise ValueError(f"Log format must be one of {list(LOG_FORMATS)}")
        return v.lower()

    class Config:
        env_file = ".env"
        env_prefix = "HTTP_SDK_"
        case_sensitive = False
