"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a remote substrate because:
1. The shop owner can see the raw data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

Each namespace is one row: namespace | payload | updated_at.
The payload cell holds the full JSON array of the collection.

TRADEOFFS:
- A cell holds at most 50,000 characters, which caps collection size
- No transactions (whole-namespace writes keep this tolerable)
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from autoshop.config import GoogleSheetsSettings, get_settings
from autoshop.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    StorageError,
)


STORE_COLUMNS = [
    "namespace",
    "payload",
    "updated_at",
]

# Google Sheets hard limit per cell
CELL_CHAR_LIMIT = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication. Only connection establishment is retried;
    reads and writes are not.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_store_sheet(self) -> gspread.Worksheet:
        """Get or create the record store worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.store_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.store_sheet_name,
                rows=100,
                cols=len(STORE_COLUMNS),
            )
            sheet.append_row(STORE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStore(KeyValueStore):
    """
    Google Sheets implementation of the key-value substrate.

    One row per namespace. Rows are located by scanning column A,
    which is fine for five namespaces. gspread is blocking, so every
    sheet call runs in a worker thread.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, namespace: str) -> tuple[Optional[int], list]:
        """Return (1-based row index, row values) for a namespace."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is the header
            if row and row[0] == namespace:
                return idx, row
        return None, []

    def _read(self, namespace: str) -> Optional[str]:
        sheet = self._client.get_store_sheet()
        idx, row = self._find_row(sheet, namespace)
        if idx is None or len(row) < 2 or not row[1]:
            return None
        return row[1]

    def _write(self, namespace: str, value: str, updated_at: str) -> None:
        sheet = self._client.get_store_sheet()
        idx, _ = self._find_row(sheet, namespace)
        if idx is None:
            sheet.append_row(
                [namespace, value, updated_at],
                value_input_option="RAW",
            )
        else:
            # Payload and timestamp in one request
            sheet.update(
                range_name=f"B{idx}:C{idx}",
                values=[[value, updated_at]],
                value_input_option="RAW",
            )

    def _delete(self, namespace: str) -> None:
        sheet = self._client.get_store_sheet()
        idx, _ = self._find_row(sheet, namespace)
        if idx is not None:
            sheet.delete_rows(idx)

    async def get(self, namespace: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read, namespace)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {namespace}: {e}")

    async def set(self, namespace: str, value: str) -> None:
        if len(value) > CELL_CHAR_LIMIT:
            raise StorageError(
                f"Collection {namespace} is {len(value)} characters, "
                f"over the {CELL_CHAR_LIMIT} character cell limit"
            )
        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            await asyncio.to_thread(self._write, namespace, value, updated_at)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {namespace}: {e}")

    async def remove(self, namespace: str) -> None:
        try:
            await asyncio.to_thread(self._delete, namespace)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to remove {namespace}: {e}")
