"""
Login Gate

A single static username/password pair taken from configuration.
There are no user accounts, sessions or password hashing; the gate only
decides whether the shop screens may be opened.
"""

import hmac
from typing import Optional

from autoshop.audit import AuditLogger
from autoshop.config import AuthSettings, get_settings


class CredentialChecker:
    """Checks a login attempt against the configured credentials."""

    def __init__(
        self,
        settings: Optional[AuthSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().auth
        self._audit = audit_logger or AuditLogger()

    def matches(self, username: str, password: str) -> bool:
        """Constant-time comparison of both fields."""
        expected_user = self._settings.username.encode("utf-8")
        expected_password = self._settings.password.get_secret_value().encode("utf-8")
        user_ok = hmac.compare_digest((username or "").encode("utf-8"), expected_user)
        password_ok = hmac.compare_digest((password or "").encode("utf-8"), expected_password)
        return user_ok and password_ok

    async def check(self, username: str, password: str) -> bool:
        """Check and audit a login attempt."""
        succeeded = self.matches(username, password)
        await self._audit.log_login_attempt(username or "", succeeded)
        return succeeded
