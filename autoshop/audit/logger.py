"""
Audit Logger

DESIGN DECISION: Every record store mutation and every storage fault
is logged as a structured event. This provides:
1. Traceability of what happened to each collection
2. Debugging capability when the substrate misbehaves

The audit logger:
- Is async so it composes with the record store operations
- Keeps a bounded in-memory history of recent events
"""

from typing import Optional

import structlog

from autoshop.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Keeps the last ``history_size`` events in memory so callers (and
    tests) can inspect what just happened.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("autoshop.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, oldest first."""
        return list(self._history)

    async def log(self, event: AuditEvent) -> None:
        """Log an audit event at its severity."""
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[0]

        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    async def log_record_added(self, namespace: str, record_id: str) -> None:
        await self.log(AuditEventBuilder.record_added(namespace, record_id))

    async def log_record_deleted(self, namespace: str, record_id: str) -> None:
        await self.log(AuditEventBuilder.record_deleted(namespace, record_id))

    async def log_record_not_found(
        self,
        namespace: str,
        record_id: str,
        operation: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.record_not_found(namespace, record_id, operation)
        )

    async def log_record_invalid(self, namespace: str, errors: list[dict]) -> None:
        await self.log(AuditEventBuilder.record_invalid(namespace, errors))

    async def log_collection_cleared(self, namespace: str) -> None:
        await self.log(AuditEventBuilder.collection_cleared(namespace))

    async def log_status_updated(
        self,
        namespace: str,
        record_id: str,
        old_status: str,
        new_status: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.status_updated(namespace, record_id, old_status, new_status)
        )

    async def log_status_rejected(self, namespace: str, record_id: str, reason: str) -> None:
        await self.log(AuditEventBuilder.status_rejected(namespace, record_id, reason))

    async def log_receivable_created(
        self,
        namespace: str,
        receivable_id: str,
        service_id: str,
        amount: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.receivable_created(namespace, receivable_id, service_id, amount)
        )

    async def log_payment_received(
        self,
        namespace: str,
        receivable_id: str,
        income_id: str,
        amount: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.payment_received(namespace, receivable_id, income_id, amount)
        )

    async def log_saga_compensated(self, service_id: str, reason: Optional[str]) -> None:
        await self.log(AuditEventBuilder.saga_compensated(service_id, reason))

    async def log_saga_compensation_failed(self, service_id: str, reason: Optional[str]) -> None:
        await self.log(AuditEventBuilder.saga_compensation_failed(service_id, reason))

    async def log_login_attempt(self, username: str, succeeded: bool) -> None:
        await self.log(AuditEventBuilder.login_attempt(username, succeeded))

    async def log_storage_fault(
        self,
        namespace: str,
        operation: str,
        error_message: str,
        record_id: Optional[str] = None,
    ) -> None:
        """Log a substrate failure."""
        await self.log(
            AuditEventBuilder.storage_fault(
                namespace=namespace,
                operation=operation,
                error_message=error_message,
                record_id=record_id,
            )
        )
