"""
Data Models Package

This package contains all Pydantic models used by the record store.
Every persisted record must conform to these schemas.
"""

from autoshop.models.records import (
    Appointment,
    AppointmentStatus,
    Client,
    CollectionName,
    FinancialKind,
    FinancialRecord,
    FinancialSummary,
    OperationResult,
    OperationStatus,
    ReceivableStatus,
    Service,
    ServiceRegistrationResult,
    StockItem,
    StoredRecord,
    ValidationIssue,
    ValidationResult,
    new_record_id,
)
from autoshop.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "Appointment",
    "AppointmentStatus",
    "Client",
    "CollectionName",
    "FinancialKind",
    "FinancialRecord",
    "FinancialSummary",
    "OperationResult",
    "OperationStatus",
    "ReceivableStatus",
    "Service",
    "ServiceRegistrationResult",
    "StockItem",
    "StoredRecord",
    "ValidationIssue",
    "ValidationResult",
    "new_record_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
