"""Audit logging package."""

from autoshop.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
