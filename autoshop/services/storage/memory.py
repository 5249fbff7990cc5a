"""In-memory key-value substrate, used by tests and ephemeral sessions."""

from typing import Optional

from autoshop.services.storage.interface import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed substrate. Contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, namespace: str) -> Optional[str]:
        return self._data.get(namespace)

    async def set(self, namespace: str, value: str) -> None:
        self._data[namespace] = value

    async def remove(self, namespace: str) -> None:
        self._data.pop(namespace, None)

    def namespaces(self) -> list[str]:
        """Namespaces currently holding data."""
        return sorted(self._data)
