"""Services package."""

from ledgerbook.services.storage import (
    AppsScriptRemoteLedger,
    EntryCacheInterface,
    GoogleSheetsClient,
    GoogleSheetsRemoteLedger,
    LocalEntryCache,
    LocalStateStore,
    RemoteLedgerInterface,
    RemoteUnavailableError,
    StorageError,
)

__all__ = [
    "AppsScriptRemoteLedger",
    "EntryCacheInterface",
    "GoogleSheetsClient",
    "GoogleSheetsRemoteLedger",
    "LocalEntryCache",
    "LocalStateStore",
    "RemoteLedgerInterface",
    "RemoteUnavailableError",
    "StorageError",
]
