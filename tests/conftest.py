"""Shared fixtures: an in-memory substrate that can be told to fail."""

import pytest

from autoshop.audit import AuditLogger
from autoshop.services.storage import InMemoryKeyValueStore, StorageError
from autoshop.store import RecordStore


class FlakyKeyValueStore(InMemoryKeyValueStore):
    """In-memory substrate with switchable per-namespace faults."""

    def __init__(self):
        super().__init__()
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()
        self.write_count = 0

    async def get(self, namespace):
        if namespace in self.fail_reads:
            raise StorageError(f"read failed for {namespace}")
        return await super().get(namespace)

    async def set(self, namespace, value):
        if namespace in self.fail_writes:
            raise StorageError(f"write failed for {namespace}")
        self.write_count += 1
        await super().set(namespace, value)

    async def remove(self, namespace):
        if namespace in self.fail_writes:
            raise StorageError(f"remove failed for {namespace}")
        self.write_count += 1
        await super().remove(namespace)


@pytest.fixture
def storage():
    return FlakyKeyValueStore()


@pytest.fixture
def notifications():
    """Messages the user would have seen, as (title, message) pairs."""
    return []


@pytest.fixture
def store(storage, notifications):
    return RecordStore(
        storage,
        audit_logger=AuditLogger(),
        notifier=lambda title, message: notifications.append((title, message)),
    )
