"""Aggregation and period bucketing package."""

from ledgerbook.queries.aggregation import (
    filter_by_date,
    filter_by_range,
    period_series,
    period_totals,
    recent_entries,
    totals,
)
from ledgerbook.queries.periods import (
    BUCKET_COUNTS,
    bucket_ranges,
    current_range,
    start_of_week,
)

__all__ = [
    "BUCKET_COUNTS",
    "bucket_ranges",
    "current_range",
    "filter_by_date",
    "filter_by_range",
    "period_series",
    "period_totals",
    "recent_entries",
    "start_of_week",
    "totals",
]
