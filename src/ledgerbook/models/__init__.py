"""
Data Models Package

This package contains all Pydantic models used in Ledgerbook.
All data flowing through the system must conform to these schemas.
"""

from ledgerbook.models.entry import (
    DEFAULT_NOTE,
    ChartBucket,
    DateRange,
    Entry,
    EntryDraft,
    EntryType,
    StatsPeriod,
    Totals,
)
from ledgerbook.models.session import (
    SessionContext,
    SessionState,
    Theme,
)

__all__ = [
    # Entry models
    "DEFAULT_NOTE",
    "ChartBucket",
    "DateRange",
    "Entry",
    "EntryDraft",
    "EntryType",
    "StatsPeriod",
    "Totals",
    # Session models
    "SessionContext",
    "SessionState",
    "Theme",
]
