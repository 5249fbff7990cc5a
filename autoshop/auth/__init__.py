"""Login gate package."""

from autoshop.auth.credentials import CredentialChecker

__all__ = ["CredentialChecker"]
