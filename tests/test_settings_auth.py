"""
Tests for configuration loading and the login gate.
"""

import pytest

from autoshop.audit import AuditLogger
from autoshop.auth import CredentialChecker
from autoshop.config import AuthSettings, StorageSettings, get_settings, validate_all_settings
from autoshop.models.audit import AuditEventType


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run each test away from any real .env file, with fresh cached settings."""
    monkeypatch.chdir(tmp_path)
    for name in ["STORAGE_BACKEND", "STORAGE_DATA_DIR", "STORAGE_NAMESPACE_PREFIX",
                 "AUTH_USERNAME", "AUTH_PASSWORD"]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:

    def test_defaults(self):
        settings = get_settings()
        assert settings.storage.backend == "json"
        assert settings.storage.namespace_prefix == ""
        assert settings.auth.username == "admin"
        assert settings.app.debug_mode is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("STORAGE_NAMESPACE_PREFIX", "@shop:")
        storage = StorageSettings()
        assert storage.backend == "memory"
        assert storage.namespace_prefix == "@shop:"

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "postgres")
        with pytest.raises(ValueError):
            StorageSettings()

    def test_validate_all_settings(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["auth"] is True
        assert "google_sheets" not in results

    def test_validate_all_settings_requires_sheets_config(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        results = validate_all_settings()
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


class TestCredentialChecker:

    @pytest.fixture
    def audit_logger(self):
        return AuditLogger()

    @pytest.mark.asyncio
    async def test_default_credentials(self, audit_logger):
        checker = CredentialChecker(AuthSettings(), audit_logger=audit_logger)
        assert await checker.check("admin", "123") is True
        assert audit_logger.recent_events[-1].event_type == AuditEventType.LOGIN_SUCCEEDED

    @pytest.mark.asyncio
    async def test_wrong_password(self, audit_logger):
        checker = CredentialChecker(AuthSettings(), audit_logger=audit_logger)
        assert await checker.check("admin", "wrong") is False
        assert audit_logger.recent_events[-1].event_type == AuditEventType.LOGIN_FAILED

    def test_configured_credentials(self, monkeypatch):
        monkeypatch.setenv("AUTH_USERNAME", "oficina")
        monkeypatch.setenv("AUTH_PASSWORD", "s3cret")
        checker = CredentialChecker()
        assert checker.matches("oficina", "s3cret") is True
        assert checker.matches("admin", "123") is False

    def test_empty_input(self):
        checker = CredentialChecker(AuthSettings())
        assert checker.matches("", "") is False
        assert checker.matches(None, None) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
