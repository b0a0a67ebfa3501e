"""
Abstract Storage Interfaces

DESIGN DECISION: Two storage roles with very different contracts.

EntryCacheInterface - the local copy. Synchronous, always answers,
never raises. It is the single source of truth for reads within a session.

RemoteLedgerInterface - the durable remote copy. Asynchronous and
best-effort: every failure (unreachable endpoint, malformed body,
rejected credential) degrades to None / False instead of raising,
so the local experience is never blocked by the network.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ledgerbook.models.entry import Entry


class EntryCacheInterface(ABC):
    """
    Local durable cache of the full entry collection.

    Implementations keep the in-memory view consistent even when the
    durable write fails.
    """

    @abstractmethod
    def load_all(self) -> list[Entry]:
        """
        Return the cached collection in last-written order.

        Returns an empty list if the cache is absent or corrupt.
        """
        pass

    @abstractmethod
    def replace_all(self, entries: Sequence[Entry]) -> None:
        """Overwrite the entire collection (used after a successful remote fetch)."""
        pass

    @abstractmethod
    def append(self, entry: Entry) -> None:
        """Add one entry and persist."""
        pass

    @abstractmethod
    def remove_by_id(self, entry_id: str) -> None:
        """Remove the entry with this id. No-op if it is absent."""
        pass

    @abstractmethod
    def begin_refresh(self) -> int:
        """
        Start journaling local writes for a remote refresh.

        Every session sharing the cache is journaled, not just the caller.

        Returns:
            Marker to hand back to commit_refresh / abort_refresh
        """
        pass

    @abstractmethod
    def commit_refresh(self, marker: int, fetched: Sequence[Entry]) -> int:
        """
        Replace the collection with `fetched`, then replay the local writes
        journaled since `marker` on top of it, atomically.

        Returns:
            Number of replayed writes
        """
        pass

    @abstractmethod
    def abort_refresh(self, marker: int) -> None:
        """End a refresh without touching the collection."""
        pass


class RemoteLedgerInterface(ABC):
    """
    Best-effort bridge to an external append-only ledger.

    None from fetch_all means "unavailable": the caller keeps using
    its local cache.
    """

    @abstractmethod
    async def fetch_all(self, credential: str) -> Optional[list[Entry]]:
        """
        Fetch the full remote collection.

        Args:
            credential: Shared secret authorizing the call

        Returns:
            All remote entries, or None if the remote is unavailable
        """
        pass

    @abstractmethod
    async def append(self, entry: Entry, credential: str) -> bool:
        """
        Push one new entry.

        Returns:
            True if the remote acknowledged the write
        """
        pass

    @abstractmethod
    async def remove_by_id(self, entry_id: str, credential: str) -> bool:
        """
        Push a deletion.

        Returns:
            True if the remote acknowledged the deletion
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class RemoteUnavailableError(StorageError):
    """Could not reach or authenticate against the remote ledger."""
    pass
