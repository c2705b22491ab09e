"""Configuration package."""

from factory_ledger.config.settings import (
    AppSettings,
    ReceiptSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ReceiptSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
