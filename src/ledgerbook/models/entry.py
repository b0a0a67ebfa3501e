"""
Core Data Models for Ledgerbook

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the entry invariants at runtime
2. Coerce whatever the remote ledger sends into well-formed entries
3. Be serializable for the local cache and the wire

DESIGN DECISION: Dates stay zero-padded ISO strings (YYYY-MM-DD).
Lexicographic order equals chronological order for that format, so
filtering never needs real date objects. Conversion to datetime.date
happens only where calendar arithmetic is needed (see queries.periods).
"""

import math
import re
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
_DATE_RE = re.compile(DATE_PATTERN)

DEFAULT_NOTE = "No note"


# =============================================================================
# ENUMS
# =============================================================================

class EntryType(str, Enum):
    """Direction of money. Exactly two variants."""
    INCOME = "income"
    EXPENSE = "expense"


class StatsPeriod(str, Enum):
    """Aggregation granularity for statistics."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    TOTAL = "total"


# =============================================================================
# ENTRY
# =============================================================================

class Entry(BaseModel):
    """
    One recorded income or expense transaction.

    Entries are never edited. They are created by the write path
    and removed wholesale by id.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique id, never reused"
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Magnitude; the sign is carried by type"
    )
    note: str = Field(
        default=DEFAULT_NOTE,
        description="Free-text label"
    )
    type: EntryType
    date: str = Field(
        ...,
        pattern=DATE_PATTERN,
        description="Local calendar date of the recording device"
    )
    time: str = Field(
        default="",
        description="Local time of day (HH:MM:SS), display only"
    )
    created_at: int = Field(
        default=0,
        alias="createdAt",
        description="Creation timestamp in epoch milliseconds"
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with the field names used by the cache and the remote ledger."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_remote(cls, raw: Any) -> Optional["Entry"]:
        """
        Build an entry from an untrusted remote record.

        Returns None when the record cannot become a valid entry
        (missing id, or a date that is not YYYY-MM-DD after truncation).
        """
        if not isinstance(raw, dict):
            return None

        entry_id = _coerce_str(raw.get("id")).strip()
        if not entry_id:
            return None

        day = _coerce_str(raw.get("date")).strip().split("T")[0]
        if not _DATE_RE.match(day):
            return None

        return cls(
            id=entry_id,
            amount=abs(_coerce_float(raw.get("amount"))),
            note=_coerce_str(raw.get("note")),
            type=EntryType.INCOME if raw.get("type") == EntryType.INCOME.value else EntryType.EXPENSE,
            date=day,
            time=_coerce_str(raw.get("time")),
            created_at=_coerce_int(raw.get("createdAt")),
        )


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _coerce_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    text = str(value).strip()
    try:
        return int(text)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(text))
    except (TypeError, ValueError, OverflowError):
        return 0


class EntryDraft(BaseModel):
    """
    User input for a new entry, before id and timestamps are assigned.

    Validation happens here so that nothing partial ever reaches the store.
    """
    model_config = ConfigDict(str_strip_whitespace=True, allow_inf_nan=False)

    amount: float = Field(
        ...,
        gt=0,
        description="Positive amount entered by the user"
    )
    note: str = Field(
        default="",
        max_length=500,
    )
    type: EntryType

    @field_validator('amount', mode='before')
    @classmethod
    def reject_blank_amount(cls, v: Any) -> Any:
        """Blank input is a missing amount, not zero."""
        if isinstance(v, str) and not v.strip():
            raise ValueError("Amount is required")
        if isinstance(v, bool):
            raise ValueError("Amount must be a number")
        return v


# =============================================================================
# DERIVED VALUES
# =============================================================================

class Totals(BaseModel):
    """Income, expense and balance of an entry set. Never persisted."""
    model_config = ConfigDict(frozen=True)

    income: float = 0.0
    expense: float = 0.0

    @computed_field
    @property
    def balance(self) -> float:
        return self.income - self.expense


class DateRange(BaseModel):
    """
    Inclusive range of calendar dates.

    A range whose start is after its end is allowed and simply matches nothing.
    """
    model_config = ConfigDict(frozen=True)

    start: str = Field(..., pattern=DATE_PATTERN)
    end: str = Field(..., pattern=DATE_PATTERN)

    @classmethod
    def from_dates(cls, start: date, end: date) -> "DateRange":
        return cls(start=start.isoformat(), end=end.isoformat())

    def contains(self, day: str) -> bool:
        return self.start <= day <= self.end


class ChartBucket(BaseModel):
    """One slice of a period series."""
    model_config = ConfigDict(frozen=True)

    label: str
    income: float = 0.0
    expense: float = 0.0
