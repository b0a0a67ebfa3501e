"""
Aggregation Engine

Pure functions over an in-memory collection of entries. Nothing here
touches storage, the clock, or the network, and nothing here raises on
well-formed input: empty collections, empty ranges and reference dates
without entries all produce zero-valued results.

Date filtering compares YYYY-MM-DD strings directly; for zero-padded ISO
dates lexicographic order is chronological order.
"""

from datetime import date
from typing import Iterable, Optional, Sequence

from ledgerbook.models.entry import (
    ChartBucket,
    DateRange,
    Entry,
    EntryType,
    StatsPeriod,
    Totals,
)
from ledgerbook.queries.periods import bucket_ranges, current_range


def totals(entries: Iterable[Entry]) -> Totals:
    """Sum income and expense in a single pass."""
    income = 0.0
    expense = 0.0
    for entry in entries:
        if entry.type == EntryType.INCOME:
            income += entry.amount
        else:
            expense += entry.amount
    return Totals(income=income, expense=expense)


def filter_by_date(entries: Iterable[Entry], day: str) -> list[Entry]:
    """Entries recorded on exactly this YYYY-MM-DD day."""
    return [entry for entry in entries if entry.date == day]


def filter_by_range(entries: Iterable[Entry], date_range: DateRange) -> list[Entry]:
    """Entries with start <= date <= end. An inverted range matches nothing."""
    return [entry for entry in entries if date_range.contains(entry.date)]


def _within(entries: Sequence[Entry], date_range: Optional[DateRange]) -> Sequence[Entry]:
    if date_range is None:
        return entries
    return filter_by_range(entries, date_range)


def period_series(
    period: StatsPeriod,
    entries: Iterable[Entry],
    reference: date,
) -> list[ChartBucket]:
    """
    Income/expense per bucket for the chart, oldest bucket first.

    See queries.periods for bucket counts and boundaries.
    """
    entries = list(entries)
    series = []
    for label, date_range in bucket_ranges(period, reference):
        bucket_totals = totals(_within(entries, date_range))
        series.append(ChartBucket(
            label=label,
            income=bucket_totals.income,
            expense=bucket_totals.expense,
        ))
    return series


def period_totals(
    period: StatsPeriod,
    entries: Iterable[Entry],
    reference: date,
) -> Totals:
    """Totals of the one window of `period` that contains the reference date."""
    entries = list(entries)
    return totals(_within(entries, current_range(period, reference)))


def recent_entries(
    entries: Iterable[Entry],
    day: str,
    limit: int = 10,
) -> list[Entry]:
    """Entries of one day, newest first."""
    day_entries = filter_by_date(entries, day)
    day_entries.sort(key=lambda entry: entry.created_at, reverse=True)
    return day_entries[:limit]
