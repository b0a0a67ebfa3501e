"""
Local Client State and Entry Cache

DESIGN DECISION: The local copy is a single JSON document on disk,
keyed like browser local storage ("ledger_entries", "authentication_key",
"theme"). It is read once, kept in memory, and rewritten atomically
(temp file + rename) on every change.

TRADEOFFS:
- Whole-file rewrites are fine for a personal ledger (hundreds of rows)
- A corrupt file is treated as empty state, never as an error
- If the disk write fails the in-memory view still reflects the change
"""

import contextlib
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from pydantic import ValidationError

from ledgerbook.logs import get_logger
from ledgerbook.models.entry import Entry
from ledgerbook.services.storage.interface import EntryCacheInterface


ENTRIES_KEY = "ledger_entries"

# Journal operations
APPEND = "append"
REMOVE = "remove"

logger = get_logger(__name__)


class LocalStateStore:
    """
    Small persistent key/value store for client-side state.

    With path=None nothing touches the disk (tests, ephemeral sessions).
    Safe to share between threads.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path) if path else None
        self._lock = threading.RLock()
        self._data: dict[str, Any] = self._read()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def _read(self) -> dict[str, Any]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("local_state_unreadable", path=str(self._path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("local_state_unreadable", path=str(self._path), error="not an object")
            return {}
        return data

    def _flush(self) -> bool:
        """Write the whole document. Returns False (and logs) on failure."""
        if self._path is None:
            return True
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, ensure_ascii=False)
            os.replace(tmp_name, self._path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning("local_state_write_failed", path=str(self._path), error=str(e))
            if tmp_name and os.path.exists(tmp_name):
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            return False

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        with self._lock:
            self._data[key] = value
            return self._flush()

    def remove(self, key: str) -> bool:
        with self._lock:
            if key not in self._data:
                return True
            del self._data[key]
            return self._flush()


class LocalEntryCache(EntryCacheInterface):
    """
    Entry cache stored under one key of a LocalStateStore.

    Rows that fail validation are dropped on load; the rest of the
    cache is still usable.

    One cache is shared by every session of the process, and Streamlit
    runs sessions on separate threads: all access goes through one lock.
    While any refresh is open, appends and removals are journaled so that
    commit_refresh can replay them on top of the fetched collection.
    """

    def __init__(self, store: LocalStateStore, key: str = ENTRIES_KEY):
        self._store = store
        self._key = key
        self._lock = threading.RLock()
        self._entries: list[Entry] = self._decode(store.get(key))
        self._journal: list[tuple[int, str, Any]] = []
        self._sequence = 0
        self._open_refreshes = 0

    def _decode(self, raw: Any) -> list[Entry]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("entry_cache_corrupt", key=self._key, error="not a list")
            return []

        entries = []
        skipped = 0
        for row in raw:
            try:
                entries.append(Entry.model_validate(row))
            except ValidationError:
                skipped += 1
        if skipped:
            logger.warning("entry_cache_rows_skipped", key=self._key, skipped=skipped)
        return entries

    def _persist(self) -> None:
        self._store.set(self._key, [entry.to_wire() for entry in self._entries])

    def _record(self, op: str, value: Any) -> None:
        if self._open_refreshes:
            self._journal.append((self._sequence, op, value))
        self._sequence += 1

    def load_all(self) -> list[Entry]:
        with self._lock:
            return list(self._entries)

    def replace_all(self, entries: Sequence[Entry]) -> None:
        with self._lock:
            self._entries = list(entries)
            self._persist()

    def append(self, entry: Entry) -> None:
        with self._lock:
            self._entries.append(entry)
            self._record(APPEND, entry)
            self._persist()

    def remove_by_id(self, entry_id: str) -> None:
        with self._lock:
            # Journaled even when absent here: the fetched copy may still hold it
            self._record(REMOVE, entry_id)
            remaining = [entry for entry in self._entries if entry.id != entry_id]
            if len(remaining) == len(self._entries):
                return
            self._entries = remaining
            self._persist()

    def begin_refresh(self) -> int:
        with self._lock:
            self._open_refreshes += 1
            return self._sequence

    def _close_refresh(self) -> None:
        self._open_refreshes = max(self._open_refreshes - 1, 0)
        if not self._open_refreshes:
            self._journal.clear()

    def commit_refresh(self, marker: int, fetched: Sequence[Entry]) -> int:
        with self._lock:
            pending = [(op, value) for seq, op, value in self._journal if seq >= marker]
            self._entries = replay_journal(fetched, pending)
            self._persist()
            self._close_refresh()
            return len(pending)

    def abort_refresh(self, marker: int) -> None:
        with self._lock:
            self._close_refresh()


def replay_journal(fetched: Sequence[Entry], journal: Sequence[tuple[str, Any]]) -> list[Entry]:
    """Apply journaled local writes, in order, on top of a fetched collection."""
    entries = list(fetched)
    for op, value in journal:
        if op == APPEND:
            if all(entry.id != value.id for entry in entries):
                entries.append(value)
        else:
            entries = [entry for entry in entries if entry.id != value]
    return entries
