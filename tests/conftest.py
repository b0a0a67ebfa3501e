"""Shared fixtures for Ledgerbook tests."""

from typing import Optional

import pytest

from ledgerbook.models import Entry, EntryType
from ledgerbook.services.storage import LocalEntryCache, LocalStateStore


def make_entry(
    entry_id: str,
    amount: float,
    entry_type: EntryType = EntryType.EXPENSE,
    day: str = "2024-01-01",
    created_at: int = 0,
    note: Optional[str] = None,
) -> Entry:
    return Entry(
        id=entry_id,
        amount=amount,
        note=note or f"note {entry_id}",
        type=entry_type,
        date=day,
        time="12:00:00",
        created_at=created_at,
    )


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state" / "state.json"


@pytest.fixture
def store(state_path):
    return LocalStateStore(state_path)


@pytest.fixture
def cache(store):
    return LocalEntryCache(store)
