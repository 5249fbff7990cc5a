"""Record store package."""

from autoshop.store.record_store import (
    AppointmentCollection,
    FinancialRecordCollection,
    Notifier,
    RecordCollection,
    RecordStore,
)

__all__ = [
    "AppointmentCollection",
    "FinancialRecordCollection",
    "Notifier",
    "RecordCollection",
    "RecordStore",
]
