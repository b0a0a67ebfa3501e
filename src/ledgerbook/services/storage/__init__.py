"""
Storage Services Package

Provides the local entry cache and the remote ledger backends.
The remote side is behind an abstract interface so the Apps Script
endpoint and direct spreadsheet access are interchangeable.
"""

from ledgerbook.services.storage.interface import (
    EntryCacheInterface,
    RemoteLedgerInterface,
    RemoteUnavailableError,
    StorageError,
)
from ledgerbook.services.storage.local_cache import (
    ENTRIES_KEY,
    LocalEntryCache,
    LocalStateStore,
)
from ledgerbook.services.storage.apps_script import AppsScriptRemoteLedger
from ledgerbook.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRemoteLedger,
)

__all__ = [
    # Interfaces
    "EntryCacheInterface",
    "RemoteLedgerInterface",
    # Exceptions
    "RemoteUnavailableError",
    "StorageError",
    # Local state
    "ENTRIES_KEY",
    "LocalEntryCache",
    "LocalStateStore",
    # Remote backends
    "AppsScriptRemoteLedger",
    "GoogleSheetsClient",
    "GoogleSheetsRemoteLedger",
]
