"""
Configuration Management for the Auto Shop Record Store

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The storage backend, its location and the login credentials are all
chosen from the environment, validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value substrate selection."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    backend: Literal["memory", "json", "google_sheets"] = Field(
        default="json",
        description="Which key-value substrate backs the record store"
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per namespace (json backend)"
    )
    namespace_prefix: str = Field(
        default="",
        max_length=50,
        description="Prefix prepended to every namespace key"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets substrate configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    store_sheet_name: str = Field(
        default="RecordStore",
        description="Worksheet holding one row per namespace"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AuthSettings(BaseSettings):
    """Static credentials for the login gate."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        extra="ignore"
    )

    username: str = Field(default="admin", min_length=1)
    password: SecretStr = Field(default=SecretStr("123"))


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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )


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

    # Sub-settings are loaded lazily so a partial environment still works

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

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

    Returns a dict of {setting_name: is_valid}, plus a
    ``<name>_error`` entry for each failure. Google Sheets is only
    checked when it is the selected backend.
    """
    results = {}

    settings = get_settings()

    checks = {
        "storage": lambda: settings.storage,
        "auth": lambda: settings.auth,
        "app": lambda: settings.app,
    }

    try:
        backend = settings.storage.backend
    except ValueError:
        backend = None
    if backend == "google_sheets":
        checks["google_sheets"] = lambda: settings.google_sheets

    for name, load in checks.items():
        try:
            load()
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
