"""
Configuration Management for the Bill Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The simulated API delay, the storage key and the failure toggle are the
only knobs the storage layer has, and they all live in StoreSettings.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Simulated API / local storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BILL_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=10.0,
        description="Simulated network delay for every fetch and save"
    )
    storage_key: str = Field(
        default="myBills",
        min_length=1,
        description="Key the bills snapshot is stored under"
    )
    data_file: Path = Field(
        default=Path("data/local_storage.json"),
        description="JSON file backing the key-value storage"
    )
    use_file_storage: bool = Field(
        default=True,
        description="Persist to data_file; when False, keep everything in memory"
    )
    simulate_failure: bool = Field(
        default=False,
        description="Start with simulated save failures switched on"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the stdlib root logger"
    )

    default_currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="Currency used when the form leaves it blank"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('default_currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def effective_log_level(self) -> str:
        """Level handed to configure_logging()."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries for the sections that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.store
        results["store"] = True
    except Exception as e:
        results["store"] = False
        results["store_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
