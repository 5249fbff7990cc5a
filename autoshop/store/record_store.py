"""
Record Store

DESIGN DECISION: Five collections share one generic implementation.
Each collection lives under its own namespace as a single JSON array,
and every mutation is read-whole-collection / modify / write-whole-collection.

GUARANTEES:
- list() preserves insertion order
- Operations never raise to the caller; they return an OperationResult
  (or an empty list for reads)
- A StorageError is logged, shown to the user through the notifier and
  converted to a STORAGE_FAULT result. It is never retried.
- "Not found" is a warning, not a fault

CONCURRENCY: Mutations on one collection are serialized by a per-collection
asyncio.Lock, so un-awaited back-to-back calls on the same store instance
cannot clobber each other. Two store instances (or two processes) sharing
one substrate still race; there is no versioning.
"""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from pydantic import ValidationError

from autoshop.audit import AuditLogger
from autoshop.models.records import (
    Appointment,
    AppointmentStatus,
    Client,
    CollectionName,
    FinancialKind,
    FinancialRecord,
    OperationResult,
    OperationStatus,
    ReceivableStatus,
    Service,
    StockItem,
    StoredRecord,
)
from autoshop.services.storage import (
    KeyValueStore,
    NotFoundError,
    SerializationError,
    StorageError,
)


# (title, message) - the presentation layer shows it as a dialog
Notifier = Callable[[str, str], None]

RecordT = TypeVar("RecordT", bound=StoredRecord)


class RecordCollection(Generic[RecordT]):
    """
    A namespaced, ordered collection of one record type.

    Usage:
        result = await store.clients.add(name="Maria", phone="51999999999")
        clients = await store.clients.list()
        await store.clients.delete_by_id(result.record_id)
    """

    def __init__(
        self,
        namespace: str,
        record_type: type[RecordT],
        storage: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
        notifier: Optional[Notifier] = None,
        label: Optional[str] = None,
    ):
        """
        Initialize a collection.

        Args:
            namespace: Substrate key holding this collection's JSON array
            record_type: Pydantic model of the stored records
            storage: Key-value substrate
            audit_logger: Where operation events go
            notifier: Callback used to tell the user about faults
            label: Human-readable collection name for messages
        """
        self.namespace = namespace
        self.record_type = record_type
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._notifier = notifier
        self._label = label or namespace
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    async def _load(self) -> list[RecordT]:
        raw = await self._storage.get(self.namespace)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise SerializationError(f"{self.namespace} does not hold a JSON array")
            return [self.record_type.model_validate(item) for item in data]
        except ValueError as e:
            # Covers both json.JSONDecodeError and pydantic.ValidationError
            raise SerializationError(f"Corrupt data in {self.namespace}: {e}")

    async def _save(self, records: list[RecordT]) -> None:
        try:
            payload = json.dumps(
                [record.to_storage_dict() for record in records],
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Could not encode {self.namespace}: {e}")
        await self._storage.set(self.namespace, payload)

    @staticmethod
    def _locate(records: list[RecordT], record_id: str) -> int:
        for idx, record in enumerate(records):
            if record.id == record_id:
                return idx
        raise NotFoundError(record_id)

    # -------------------------------------------------------------------------
    # Result helpers
    # -------------------------------------------------------------------------

    def _notify(self, title: str, message: str) -> None:
        if self._notifier is not None:
            self._notifier(title, message)

    async def report_fault(
        self,
        action: str,
        error: StorageError,
        record_id: Optional[str] = None,
    ) -> OperationResult:
        """Log and notify a storage fault, returning STORAGE_FAULT."""
        await self._audit.log_storage_fault(
            namespace=self.namespace,
            operation=action,
            error_message=str(error),
            record_id=record_id,
        )
        title = "Read error" if action == "load" else "Error"
        self._notify(title, f"Could not {action} {self._label}.")
        return OperationResult(
            status=OperationStatus.STORAGE_FAULT,
            message=str(error),
            record_id=record_id,
        )

    async def _invalid(self, error: ValidationError) -> OperationResult:
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in error.errors()
        ]
        await self._audit.log_record_invalid(self.namespace, errors)
        return OperationResult(
            status=OperationStatus.INVALID,
            message="; ".join(f"{e['field']}: {e['message']}" for e in errors),
        )

    async def _not_found(self, record_id: str, action: str) -> OperationResult:
        await self._audit.log_record_not_found(self.namespace, record_id, action)
        return OperationResult(
            status=OperationStatus.NOT_FOUND,
            message=f"No record with id {record_id} in {self._label}",
            record_id=record_id,
        )

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def list(self) -> list[RecordT]:
        """
        All records in insertion order.

        Returns an empty list if the namespace was never written or if
        the read fails (the failure is logged and notified).
        """
        try:
            return await self._load()
        except StorageError as e:
            await self.report_fault("load", e)
            return []

    async def get(self, record_id: str) -> Optional[RecordT]:
        """Look up one record by id."""
        for record in await self.list():
            if record.id == record_id:
                return record
        return None

    async def find(self, record_id: str) -> Optional[RecordT]:
        """
        Look up one record by id, letting read faults through.

        Raises:
            StorageError: If the collection cannot be read
        """
        records = await self._load()
        try:
            return records[self._locate(records, record_id)]
        except NotFoundError:
            return None

    async def add(self, **fields: Any) -> OperationResult:
        """
        Create a record with a fresh id and append it to the collection.

        Any ``id`` among the fields is ignored; ids are always assigned here.
        """
        fields.pop("id", None)
        try:
            record = self.record_type(**fields)
        except ValidationError as e:
            return await self._invalid(e)
        return await self._insert(record)

    async def _insert(self, record: RecordT) -> OperationResult:
        async with self._lock:
            try:
                records = await self._load()
                records.append(record)
                await self._save(records)
            except StorageError as e:
                return await self.report_fault("save", e, record.id)

        await self._audit.log_record_added(self.namespace, record.id)
        return OperationResult(status=OperationStatus.OK, record_id=record.id)

    async def delete_by_id(self, record_id: str) -> OperationResult:
        """
        Remove one record.

        Writes only when a record was actually removed. An unknown id
        reports NOT_FOUND and leaves storage untouched.
        """
        async with self._lock:
            try:
                records = await self._load()
                remaining = [record for record in records if record.id != record_id]
                if len(remaining) == len(records):
                    raise NotFoundError(record_id)
                await self._save(remaining)
            except NotFoundError:
                return await self._not_found(record_id, "delete")
            except StorageError as e:
                return await self.report_fault("delete", e, record_id)

        await self._audit.log_record_deleted(self.namespace, record_id)
        return OperationResult(status=OperationStatus.OK, record_id=record_id)

    async def clear(self) -> OperationResult:
        """Remove the whole namespace. Every record is gone."""
        async with self._lock:
            try:
                await self._storage.remove(self.namespace)
            except StorageError as e:
                return await self.report_fault("clear", e)

        await self._audit.log_collection_cleared(self.namespace)
        return OperationResult(status=OperationStatus.OK)


class AppointmentCollection(RecordCollection[Appointment]):
    """Appointments, with free status transitions."""

    def __init__(
        self,
        namespace: str,
        storage: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(
            namespace,
            Appointment,
            storage,
            audit_logger=audit_logger,
            notifier=notifier,
            label="appointments",
        )

    async def update_status(
        self,
        record_id: str,
        new_status: Union[AppointmentStatus, str],
    ) -> OperationResult:
        """
        Set an appointment's status.

        No transition is forbidden; completed or cancelled appointments
        can be reopened.
        """
        try:
            status = AppointmentStatus(new_status)
        except ValueError:
            return OperationResult(
                status=OperationStatus.INVALID,
                message=f"Unknown appointment status: {new_status}",
                record_id=record_id,
            )

        async with self._lock:
            try:
                records = await self._load()
                idx = self._locate(records, record_id)
                old_status = records[idx].status
                records[idx] = records[idx].model_copy(update={"status": status})
                await self._save(records)
            except NotFoundError:
                return await self._not_found(record_id, "update_status")
            except StorageError as e:
                return await self.report_fault("update", e, record_id)

        await self._audit.log_status_updated(
            self.namespace, record_id, old_status.value, status.value
        )
        return OperationResult(status=OperationStatus.OK, record_id=record_id)


class FinancialRecordCollection(RecordCollection[FinancialRecord]):
    """
    The ledger.

    Only service receivables have a status, and it only moves from
    PENDING to RECEIVED. Receiving appends an independent INCOME record
    in the same write.
    """

    def __init__(
        self,
        namespace: str,
        storage: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
        notifier: Optional[Notifier] = None,
    ):
        super().__init__(
            namespace,
            FinancialRecord,
            storage,
            audit_logger=audit_logger,
            notifier=notifier,
            label="financial records",
        )

    async def add_receivable(
        self,
        service: Service,
        amount: Union[Decimal, int, float, str],
    ) -> OperationResult:
        """Create a PENDING receivable describing and linking to a service."""
        try:
            record = FinancialRecord(
                kind=FinancialKind.SERVICE_RECEIVABLE,
                description=f"Service: {service.describe()}",
                amount=amount,
                status=ReceivableStatus.PENDING,
                service_id=service.id,
            )
        except ValidationError as e:
            return await self._invalid(e)

        result = await self._insert(record)
        if result.success:
            await self._audit.log_receivable_created(
                self.namespace, record.id, service.id, str(record.amount)
            )
        return result

    @staticmethod
    def _transition_error(
        record: FinancialRecord,
        new_status: ReceivableStatus,
    ) -> Optional[str]:
        """Why this transition is not allowed, or None if it is."""
        if not record.is_receivable:
            return f"{record.kind.value} records have no status"
        if record.status == ReceivableStatus.RECEIVED:
            return "receivable was already received"
        if new_status == ReceivableStatus.PENDING:
            return "receivable is already pending"
        return None

    async def update_status(
        self,
        record_id: str,
        new_status: Union[ReceivableStatus, str],
    ) -> OperationResult:
        """
        Move a receivable from PENDING to RECEIVED.

        On success the receivable gets a payment timestamp and a new
        INCOME record for the same amount is appended; both land in one
        write. Anything else is rejected without writing.
        """
        try:
            status = ReceivableStatus(new_status)
        except ValueError:
            return OperationResult(
                status=OperationStatus.INVALID,
                message=f"Unknown receivable status: {new_status}",
                record_id=record_id,
            )

        async with self._lock:
            try:
                records = await self._load()
                idx = self._locate(records, record_id)
                current = records[idx]
                reason = self._transition_error(current, status)
                if reason is None:
                    received = current.mark_received()
                    income = received.to_income_record(at=received.payment_timestamp)
                    records[idx] = received
                    records.append(income)
                    await self._save(records)
            except NotFoundError:
                return await self._not_found(record_id, "update_status")
            except StorageError as e:
                return await self.report_fault("update", e, record_id)

        if reason is not None:
            await self._audit.log_status_rejected(self.namespace, record_id, reason)
            return OperationResult(
                status=OperationStatus.REJECTED,
                message=reason,
                record_id=record_id,
            )

        await self._audit.log_status_updated(
            self.namespace,
            record_id,
            ReceivableStatus.PENDING.value,
            ReceivableStatus.RECEIVED.value,
        )
        await self._audit.log_payment_received(
            self.namespace, record_id, income.id, str(income.amount)
        )
        return OperationResult(
            status=OperationStatus.OK,
            record_id=record_id,
            related_ids=[income.id],
        )

    async def mark_received(self, record_id: str) -> OperationResult:
        return await self.update_status(record_id, ReceivableStatus.RECEIVED)


class RecordStore:
    """
    The five shop collections over one substrate.

    Construct one and pass it to whatever needs it; there is no
    module-level instance.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        audit_logger: Optional[AuditLogger] = None,
        notifier: Optional[Notifier] = None,
        namespace_prefix: str = "",
    ):
        self.storage = storage
        self.audit_logger = audit_logger or AuditLogger()

        def namespace(name: CollectionName) -> str:
            return f"{namespace_prefix}{name.value}"

        self.clients: RecordCollection[Client] = RecordCollection(
            namespace(CollectionName.CLIENTS),
            Client,
            storage,
            audit_logger=self.audit_logger,
            notifier=notifier,
            label="clients",
        )
        self.services: RecordCollection[Service] = RecordCollection(
            namespace(CollectionName.SERVICES),
            Service,
            storage,
            audit_logger=self.audit_logger,
            notifier=notifier,
            label="services",
        )
        self.stock_items: RecordCollection[StockItem] = RecordCollection(
            namespace(CollectionName.STOCK_ITEMS),
            StockItem,
            storage,
            audit_logger=self.audit_logger,
            notifier=notifier,
            label="stock items",
        )
        self.financial_records = FinancialRecordCollection(
            namespace(CollectionName.FINANCIAL_RECORDS),
            storage,
            audit_logger=self.audit_logger,
            notifier=notifier,
        )
        self.appointments = AppointmentCollection(
            namespace(CollectionName.APPOINTMENTS),
            storage,
            audit_logger=self.audit_logger,
            notifier=notifier,
        )

    def collection(self, name: Union[CollectionName, str]) -> RecordCollection:
        """Look up a collection by its namespace name."""
        return {
            CollectionName.CLIENTS: self.clients,
            CollectionName.SERVICES: self.services,
            CollectionName.STOCK_ITEMS: self.stock_items,
            CollectionName.FINANCIAL_RECORDS: self.financial_records,
            CollectionName.APPOINTMENTS: self.appointments,
        }[CollectionName(name)]
