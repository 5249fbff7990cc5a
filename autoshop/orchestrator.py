"""
Main Orchestrator for the Auto Shop Record Store

This module ties the collections together for the only flows that span
more than one of them:
1. Service registration with billing (service -> receivable)
2. Receiving payment for a service (receivable -> income)

DESIGN DECISION: Registration with billing is an explicit two-step saga.
Step 1 stores the service, step 2 stores its receivable. If step 2 fails
the compensating action deletes the service, so the shop never ends up
with a billed job that has no receivable. Billing can also be done as a
separate call on an already registered service.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, NamedTuple, Optional, Union

from autoshop.audit import AuditLogger
from autoshop.auth import CredentialChecker
from autoshop.config import Settings, get_settings
from autoshop.models.records import (
    OperationResult,
    OperationStatus,
    ServiceRegistrationResult,
)
from autoshop.queries import LedgerQueries
from autoshop.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageError,
)
from autoshop.store import Notifier, RecordStore


Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def parse_amount(value: Amount) -> Optional[Decimal]:
    """A finite Decimal with at most two decimal places, or None."""
    try:
        amount = Decimal(str(value))
        if not amount.is_finite() or amount != amount.quantize(CENT):
            return None
        return amount.quantize(CENT)
    except InvalidOperation:
        return None


class ServiceRegistrationFlow:
    """
    Orchestrates service registration and billing.

    Flow:
    1. Save the service
    2. If a positive billing amount was given, save a PENDING receivable
       linked to it
    3. If step 2 fails, delete the service (compensation)
    """

    def __init__(self, store: RecordStore):
        self._store = store
        self._audit = store.audit_logger

    async def register_service(
        self,
        billing_amount: Optional[Amount] = None,
        **fields: Any,
    ) -> ServiceRegistrationResult:
        """
        Register a service, billing it when an amount is given.

        A zero or missing amount registers the service without a
        receivable. An amount that could never be billed (not a number,
        or finer than cents) is INVALID and nothing is saved.
        """
        amount = None
        if billing_amount is not None:
            amount = parse_amount(billing_amount)
            if amount is None:
                return ServiceRegistrationResult(
                    status=OperationStatus.INVALID,
                    message=f"Invalid billing amount: {billing_amount}",
                )

        saved = await self._store.services.add(**fields)
        if not saved.success or amount is None or amount <= 0:
            return ServiceRegistrationResult(**saved.model_dump())

        billed = await self.bill_service(saved.record_id, amount)
        if billed.success:
            return ServiceRegistrationResult(
                status=OperationStatus.OK,
                record_id=saved.record_id,
                receivable_id=billed.record_id,
                related_ids=[billed.record_id],
            )

        return await self._compensate(saved.record_id, billed)

    async def _compensate(
        self,
        service_id: str,
        billed: OperationResult,
    ) -> ServiceRegistrationResult:
        """Undo step 1 after step 2 failed."""
        undone = await self._store.services.delete_by_id(service_id)
        if undone.success:
            await self._audit.log_saga_compensated(service_id, billed.message)
            return ServiceRegistrationResult(
                status=billed.status,
                message=f"Service not registered: billing failed ({billed.message})",
                record_id=service_id,
                compensated=True,
            )

        await self._audit.log_saga_compensation_failed(service_id, undone.message)
        return ServiceRegistrationResult(
            status=billed.status,
            message=(
                f"Service {service_id} was registered but could not be billed "
                f"or removed ({billed.message})"
            ),
            record_id=service_id,
        )

    async def bill_service(self, service_id: str, amount: Amount) -> OperationResult:
        """Create a PENDING receivable for an already registered service."""
        services = self._store.services
        try:
            service = await services.find(service_id)
        except StorageError as e:
            return await services.report_fault("load", e, service_id)
        if service is None:
            return OperationResult(
                status=OperationStatus.NOT_FOUND,
                message=f"No service with id {service_id}",
                record_id=service_id,
            )
        return await self._store.financial_records.add_receivable(service, amount)


class PaymentFlow:
    """Receiving payment for a billed service."""

    def __init__(self, store: RecordStore):
        self._store = store

    async def receive(self, receivable_id: str) -> OperationResult:
        """
        Mark a receivable received.

        The result's ``related_ids`` holds the id of the income record
        created for the payment.
        """
        return await self._store.financial_records.mark_received(receivable_id)


class AppComponents(NamedTuple):
    store: RecordStore
    registration: ServiceRegistrationFlow
    payments: PaymentFlow
    queries: LedgerQueries
    credentials: CredentialChecker


def create_storage(settings: Optional[Settings] = None) -> KeyValueStore:
    """Build the configured key-value substrate."""
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemoryKeyValueStore()
    if storage_settings.backend == "google_sheets":
        return GoogleSheetsKeyValueStore(GoogleSheetsClient(settings.google_sheets))
    return JsonFileKeyValueStore(Path(storage_settings.data_dir))


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStore] = None,
    notifier: Optional[Notifier] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to the cached settings)
        storage: Substrate override, e.g. an in-memory store in tests
        notifier: Callback that shows fault messages to the user

    Returns:
        AppComponents sharing one RecordStore and one AuditLogger
    """
    settings = settings or get_settings()
    audit_logger = AuditLogger()

    store = RecordStore(
        storage or create_storage(settings),
        audit_logger=audit_logger,
        notifier=notifier,
        namespace_prefix=settings.storage.namespace_prefix,
    )

    return AppComponents(
        store=store,
        registration=ServiceRegistrationFlow(store),
        payments=PaymentFlow(store),
        queries=LedgerQueries(store),
        credentials=CredentialChecker(settings.auth, audit_logger=audit_logger),
    )
