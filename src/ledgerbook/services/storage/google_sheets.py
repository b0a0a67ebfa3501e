"""
Google Sheets Remote Ledger

DESIGN DECISION: Google Sheets is the durable copy of the ledger because:
1. The owner can look at every entry directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

This backend talks to the spreadsheet directly through a service
account, using the same column layout the Apps Script endpoint manages,
so both backends can point at the same sheet.

TRADEOFFS:
- gspread is blocking; calls run in a worker thread
- Deletion scans the id column (fine for a personal ledger)
- No transactions; the local cache stays the source of truth for reads
"""

import asyncio
import hmac
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from ledgerbook.config import GoogleSheetsSettings, get_settings
from ledgerbook.logs import get_logger
from ledgerbook.models.entry import Entry
from ledgerbook.services.storage.apps_script import decode_entries
from ledgerbook.services.storage.interface import (
    RemoteLedgerInterface,
    RemoteUnavailableError,
    StorageError,
)


# Column layout of the entries sheet (row 1 is the header)
ENTRY_COLUMNS = [
    "id",
    "amount",
    "note",
    "type",
    "date",
    "time",
    "createdAt",
]

logger = get_logger(__name__)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
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
                raise RemoteUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise RemoteUnavailableError(f"Failed to connect to Google Sheets: {e}")

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
                raise RemoteUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_entries_sheet(self) -> gspread.Worksheet:
        """Get or create the entries worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.entries_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.entries_sheet_name,
                rows=1000,
                cols=len(ENTRY_COLUMNS),
            )
            sheet.append_row(ENTRY_COLUMNS)
        return sheet


class GoogleSheetsRemoteLedger(RemoteLedgerInterface):
    """
    Remote ledger stored as one entry per spreadsheet row.

    The credential is checked against the configured secret before any
    sheet access, mirroring the Apps Script endpoint's PIN check.
    """

    def __init__(
        self,
        expected_credential: str,
        client: Optional[GoogleSheetsClient] = None,
    ):
        self._expected_credential = expected_credential
        self._client = client or GoogleSheetsClient()

    def _authorized(self, credential: str) -> bool:
        return hmac.compare_digest(
            credential.encode("utf-8"),
            self._expected_credential.encode("utf-8"),
        )

    @staticmethod
    def _entry_to_row(entry: Entry) -> list:
        """Convert an Entry to a spreadsheet row."""
        return [
            entry.id,
            entry.amount,
            entry.note,
            entry.type.value,
            entry.date,
            entry.time,
            entry.created_at,
        ]

    @staticmethod
    def _row_to_record(row: list) -> dict:
        """Map a raw row onto the column names; short rows are padded."""
        padded = list(row) + [""] * (len(ENTRY_COLUMNS) - len(row))
        return dict(zip(ENTRY_COLUMNS, padded))

    def _read_entries(self) -> list[Entry]:
        try:
            sheet = self._client.get_entries_sheet()
            rows = sheet.get_all_values()[1:]  # Skip header
        except RemoteUnavailableError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read entries: {e}")

        records = [self._row_to_record(row) for row in rows if row and row[0]]
        entries, discarded = decode_entries(records)
        if discarded:
            logger.warning("sheet_rows_discarded", discarded=discarded)
        return entries

    def _append_row(self, entry: Entry) -> None:
        try:
            sheet = self._client.get_entries_sheet()
            sheet.append_row(self._entry_to_row(entry), value_input_option="RAW")
        except RemoteUnavailableError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save entry: {e}")

    def _delete_row(self, entry_id: str) -> bool:
        try:
            sheet = self._client.get_entries_sheet()
            ids = sheet.col_values(1)
        except RemoteUnavailableError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete entry: {e}")

        # Row 1 is the header; delete from the bottom so indexes stay valid
        matches = [idx for idx, value in enumerate(ids[1:], start=2) if value == entry_id]
        try:
            for idx in reversed(matches):
                sheet.delete_rows(idx)
        except Exception as e:
            raise StorageError(f"Failed to delete entry: {e}")
        return True

    async def fetch_all(self, credential: str) -> Optional[list[Entry]]:
        if not self._authorized(credential):
            logger.warning("remote_fetch_rejected", error="Invalid credential")
            return None
        try:
            entries = await asyncio.to_thread(self._read_entries)
        except StorageError as e:
            logger.warning("remote_fetch_failed", error=str(e))
            return None
        logger.info("remote_fetch_completed", count=len(entries))
        return entries

    async def append(self, entry: Entry, credential: str) -> bool:
        if not self._authorized(credential):
            logger.warning("remote_post_rejected", action="ADD_ENTRY", error="Invalid credential")
            return False
        try:
            await asyncio.to_thread(self._append_row, entry)
        except StorageError as e:
            logger.warning("remote_post_failed", action="ADD_ENTRY", error=str(e))
            return False
        logger.info("remote_append_completed", entry_id=entry.id)
        return True

    async def remove_by_id(self, entry_id: str, credential: str) -> bool:
        if not self._authorized(credential):
            logger.warning("remote_post_rejected", action="DELETE_ENTRY", error="Invalid credential")
            return False
        try:
            await asyncio.to_thread(self._delete_row, entry_id)
        except StorageError as e:
            logger.warning("remote_post_failed", action="DELETE_ENTRY", error=str(e))
            return False
        logger.info("remote_delete_completed", entry_id=entry_id)
        return True
