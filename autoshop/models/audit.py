"""
Audit Models for the Auto Shop Record Store

Every mutation and every storage fault produces an audit event.
This provides:
1. Traceability of what happened to each collection
2. Debugging information when storage misbehaves
3. A record of login attempts

DESIGN DECISION: Audit events are emitted to the structured log only.
They are never written into the record namespaces.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Collection operations
    RECORD_ADDED = "record_added"
    RECORD_DELETED = "record_deleted"
    RECORD_NOT_FOUND = "record_not_found"
    RECORD_INVALID = "record_invalid"
    COLLECTION_CLEARED = "collection_cleared"

    # Status transitions
    STATUS_UPDATED = "status_updated"
    STATUS_REJECTED = "status_rejected"

    # Billing
    RECEIVABLE_CREATED = "receivable_created"
    PAYMENT_RECEIVED = "payment_received"
    SAGA_COMPENSATED = "saga_compensated"
    SAGA_COMPENSATION_FAILED = "saga_compensation_failed"

    # Login gate
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"

    # Faults
    STORAGE_FAULT = "storage_fault"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    # Context - which collection and record is this about?
    namespace: Optional[str] = Field(
        default=None,
        description="Namespace of the collection involved"
    )
    record_id: Optional[str] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "namespace": self.namespace,
            "record_id": self.record_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("clients", record_id)
        event = AuditEventBuilder.storage_fault("services", "add", error)
    """

    @staticmethod
    def record_added(namespace: str, record_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            namespace=namespace,
            record_id=record_id,
            description=f"Record added to {namespace}",
        )

    @staticmethod
    def record_deleted(namespace: str, record_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            namespace=namespace,
            record_id=record_id,
            description=f"Record deleted from {namespace}",
        )

    @staticmethod
    def record_not_found(namespace: str, record_id: str, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            namespace=namespace,
            record_id=record_id,
            description=f"Record {record_id} not found in {namespace} for {operation}",
            details={"operation": operation},
        )

    @staticmethod
    def record_invalid(namespace: str, errors: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_INVALID,
            severity=AuditSeverity.WARNING,
            namespace=namespace,
            description=f"Rejected invalid record for {namespace} ({len(errors)} errors)",
            details={"errors": errors},
        )

    @staticmethod
    def collection_cleared(namespace: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_CLEARED,
            severity=AuditSeverity.WARNING,
            namespace=namespace,
            description=f"All records removed from {namespace}",
        )

    @staticmethod
    def status_updated(
        namespace: str,
        record_id: str,
        old_status: str,
        new_status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATUS_UPDATED,
            namespace=namespace,
            record_id=record_id,
            description=f"Status changed from {old_status} to {new_status}",
            details={"old_status": old_status, "new_status": new_status},
        )

    @staticmethod
    def status_rejected(namespace: str, record_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATUS_REJECTED,
            severity=AuditSeverity.WARNING,
            namespace=namespace,
            record_id=record_id,
            description=f"Status update rejected: {reason}",
        )

    @staticmethod
    def receivable_created(
        namespace: str,
        receivable_id: str,
        service_id: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIVABLE_CREATED,
            namespace=namespace,
            record_id=receivable_id,
            description=f"Receivable of {amount} created for service {service_id}",
            details={"service_id": service_id, "amount": amount},
        )

    @staticmethod
    def payment_received(
        namespace: str,
        receivable_id: str,
        income_id: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_RECEIVED,
            namespace=namespace,
            record_id=receivable_id,
            description=f"Receivable paid, income of {amount} recorded",
            details={"income_id": income_id, "amount": amount},
        )

    @staticmethod
    def saga_compensated(service_id: str, reason: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAGA_COMPENSATED,
            severity=AuditSeverity.WARNING,
            namespace="services",
            record_id=service_id,
            description="Service removed after its receivable could not be created",
            details={"reason": reason or "unknown"},
        )

    @staticmethod
    def saga_compensation_failed(service_id: str, reason: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAGA_COMPENSATION_FAILED,
            severity=AuditSeverity.ERROR,
            namespace="services",
            record_id=service_id,
            description="Service left without receivable, compensation failed",
            error_message=reason,
        )

    @staticmethod
    def login_attempt(username: str, succeeded: bool) -> AuditEvent:
        if succeeded:
            return AuditEvent(
                event_type=AuditEventType.LOGIN_SUCCEEDED,
                description=f"User {username} logged in",
                details={"username": username},
            )
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            description="Invalid username or password",
            details={"username": username},
        )

    @staticmethod
    def storage_fault(
        namespace: str,
        operation: str,
        error_message: str,
        record_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAULT,
            severity=AuditSeverity.ERROR,
            namespace=namespace,
            record_id=record_id,
            description=f"Storage fault during {operation} on {namespace}",
            error_message=error_message,
            details={"operation": operation},
        )
