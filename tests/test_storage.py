"""
Tests for the key-value substrates.

Google Sheets is exercised through a mocked client; no network calls.
"""

from unittest.mock import ANY, Mock

import pytest

from autoshop.services.storage import (
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    StorageError,
)
from autoshop.services.storage.google_sheets import CELL_CHAR_LIMIT, STORE_COLUMNS


class TestInMemoryStore:

    @pytest.mark.asyncio
    async def test_get_set_remove(self):
        kv = InMemoryKeyValueStore()
        assert await kv.get("clients") is None

        await kv.set("clients", "[]")
        assert await kv.get("clients") == "[]"

        await kv.remove("clients")
        assert await kv.get("clients") is None

    @pytest.mark.asyncio
    async def test_remove_absent_is_noop(self):
        kv = InMemoryKeyValueStore()
        await kv.remove("never-written")
        assert kv.namespaces() == []


class TestJsonFileStore:

    @pytest.mark.asyncio
    async def test_one_file_per_namespace(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "data")
        assert await kv.get("clients") is None

        await kv.set("clients", '[{"id": "1"}]')
        await kv.set("services", "[]")

        assert (tmp_path / "data" / "clients.json").read_text(encoding="utf-8") == '[{"id": "1"}]'
        assert (tmp_path / "data" / "services.json").exists()
        assert await kv.get("clients") == '[{"id": "1"}]'

    @pytest.mark.asyncio
    async def test_overwrite_and_remove(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path)
        await kv.set("clients", "[1]")
        await kv.set("clients", "[1, 2]")
        assert await kv.get("clients") == "[1, 2]"

        await kv.remove("clients")
        await kv.remove("clients")
        assert await kv.get("clients") is None

    @pytest.mark.asyncio
    async def test_unsafe_namespace_characters(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path)
        await kv.set("@shop:clients/../x", "[]")
        assert (tmp_path / "@shop_clients_.._x.json").exists()

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        kv = JsonFileKeyValueStore(blocker)

        with pytest.raises(StorageError):
            await kv.set("clients", "[]")


class TestGoogleSheetsStore:
    """Google Sheets substrate against a mocked worksheet."""

    @pytest.fixture
    def sheet(self):
        sheet = Mock()
        sheet.get_all_values.return_value = [
            STORE_COLUMNS,
            ["clients", '[{"id": "1"}]', "2025-01-01T00:00:00+00:00"],
            ["services", "", "2025-01-01T00:00:00+00:00"],
        ]
        return sheet

    @pytest.fixture
    def kv(self, sheet):
        client = Mock()
        client.get_store_sheet.return_value = sheet
        return GoogleSheetsKeyValueStore(client)

    @pytest.mark.asyncio
    async def test_get(self, kv):
        assert await kv.get("clients") == '[{"id": "1"}]'
        assert await kv.get("services") is None
        assert await kv.get("appointments") is None

    @pytest.mark.asyncio
    async def test_set_existing_row_updates_payload_and_timestamp_together(self, kv, sheet):
        await kv.set("clients", "[]")
        sheet.update.assert_called_once_with(
            range_name="B2:C2",
            values=[["[]", ANY]],
            value_input_option="RAW",
        )
        sheet.update_cell.assert_not_called()
        sheet.append_row.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_new_namespace_appends_row(self, kv, sheet):
        await kv.set("appointments", "[]")
        sheet.append_row.assert_called_once_with(
            ["appointments", "[]", ANY],
            value_input_option="RAW",
        )

    @pytest.mark.asyncio
    async def test_remove(self, kv, sheet):
        await kv.remove("services")
        sheet.delete_rows.assert_called_once_with(3)

        await kv.remove("appointments")
        assert sheet.delete_rows.call_count == 1

    @pytest.mark.asyncio
    async def test_api_errors_become_storage_errors(self, kv, sheet):
        sheet.get_all_values.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(StorageError, match="quota exceeded"):
            await kv.get("clients")

    @pytest.mark.asyncio
    async def test_oversized_collection_is_refused(self, kv, sheet):
        with pytest.raises(StorageError, match="cell limit"):
            await kv.set("clients", "x" * (CELL_CHAR_LIMIT + 1))
        sheet.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_write_errors_become_storage_errors(self, kv, sheet):
        sheet.update.side_effect = RuntimeError("rate limited")
        with pytest.raises(StorageError, match="rate limited"):
            await kv.set("clients", "[]")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
