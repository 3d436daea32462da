"""Spam detector configuration, read from SPAM_DETECTOR_* environment variables.

get_settings() is cached, so the environment is read once per process.
Load factors are range-checked here. Their ordering is left to HashTable,
which raises ConfigError when the lower bound exceeds the upper one.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from containers import DEFAULT_LOWER_LOAD_FACTOR, DEFAULT_UPPER_LOAD_FACTOR


class Settings(BaseSettings):
    """Settings from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_prefix="SPAM_DETECTOR_", env_file=".env", case_sensitive=False)

    # Logging
    log_level: str = "WARNING"
    log_format: Literal["text", "json"] = "text"

    # Database table sizing
    lower_load_factor: float = Field(default=DEFAULT_LOWER_LOAD_FACTOR, ge=0, le=1)
    upper_load_factor: float = Field(default=DEFAULT_UPPER_LOAD_FACTOR, ge=0, le=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()
