"""Configuration package."""

from autoshop.config.settings import (
    AppSettings,
    AuthSettings,
    GoogleSheetsSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "GoogleSheetsSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
