"""
Configuration Management for Factory Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Receipt limits, storage keys and report defaults all live in one place
and every value has a default, so the ledger runs without a .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReceiptSettings(BaseSettings):
    """Limits applied to uploaded receipt files."""

    model_config = SettingsConfigDict(
        env_prefix="RECEIPT_",
        extra="ignore"
    )

    max_file_size_mb: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum size of a single receipt file in MB"
    )
    accepted_types: str = Field(
        default="image/jpeg,image/jpg,image/png,image/gif,application/pdf",
        description="Comma-separated list of accepted MIME types"
    )
    max_files: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum number of receipts attached to one expense"
    )

    @property
    def accepted_types_list(self) -> list[str]:
        """Get accepted MIME types as a list."""
        return [t.strip().lower() for t in self.accepted_types.split(",") if t.strip()]

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


class StorageSettings(BaseSettings):
    """Local document store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON document per storage key"
    )
    expenses_key: str = Field(
        default="ssMudyfExpenses",
        description="Key of the expense collection document"
    )
    settings_key: str = Field(
        default="ssMudyfSettings",
        description="Key of the company settings document"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a document write is attempted"
    )

    @field_validator("expenses_key", "settings_key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"Invalid storage key: {v!r}")
        return v


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

    app_name: str = Field(
        default="SS Mudyf Accounting System",
        description="Application name written into exports"
    )
    group_name: str = Field(
        default="SS Mudyf Group",
        description="Name of the company group owning both factories"
    )
    currency_symbol: str = Field(
        default="E",
        description="Currency symbol used in report labels (Emalangeni)"
    )
    export_version: str = Field(
        default="1.0.0",
        description="Version stamped on export and backup payloads"
    )
    recent_expenses_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many expenses the dashboard lists"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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
    def receipts(self) -> ReceiptSettings:
        return ReceiptSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for every section that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("receipts", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
