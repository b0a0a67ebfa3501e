"""
Period Bucketing

Calendar arithmetic for the statistics screen. Each period has a fixed
number of buckets anchored at a reference date:

    daily    7  trailing days ending at the reference date
    weekly   4  Monday-Sunday weeks, the last one containing the reference
    monthly  6  calendar months ending at the reference month
    yearly   3  calendar years ending at the reference year
    total    1  everything (no date range)

All dates are local calendar dates. Real datetime.date values are used
only here; everything leaving this module is a YYYY-MM-DD DateRange.
"""

import calendar
from datetime import date, timedelta
from typing import Optional

from ledgerbook.models.entry import DateRange, StatsPeriod


BUCKET_COUNTS = {
    StatsPeriod.DAILY: 7,
    StatsPeriod.WEEKLY: 4,
    StatsPeriod.MONTHLY: 6,
    StatsPeriod.YEARLY: 3,
    StatsPeriod.TOTAL: 1,
}

# Fixed English labels; strftime would follow the process locale
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
TOTAL_LABEL = "All Time"


def parse_day(day: str) -> date:
    """Parse a YYYY-MM-DD string into a date."""
    return date.fromisoformat(day)


def start_of_week(day: date) -> date:
    """Monday on or before day. A Sunday is the last day of its week."""
    return day - timedelta(days=day.weekday())


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def shift_months(day: date, months: int) -> date:
    """First day of the month `months` away from day's month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, 1)


def current_range(period: StatsPeriod, reference: date) -> Optional[DateRange]:
    """
    The single window of `period` that contains the reference date.

    Returns None for the total period (no bounds).
    """
    if period == StatsPeriod.DAILY:
        return DateRange.from_dates(reference, reference)
    if period == StatsPeriod.WEEKLY:
        monday = start_of_week(reference)
        return DateRange.from_dates(monday, monday + timedelta(days=6))
    if period == StatsPeriod.MONTHLY:
        return DateRange.from_dates(start_of_month(reference), end_of_month(reference))
    if period == StatsPeriod.YEARLY:
        return DateRange.from_dates(date(reference.year, 1, 1), date(reference.year, 12, 31))
    return None


def bucket_ranges(
    period: StatsPeriod,
    reference: date,
) -> list[tuple[str, Optional[DateRange]]]:
    """
    Labelled bucket windows for a period series, oldest first.

    The total period yields a single unbounded bucket (range None).
    """
    count = BUCKET_COUNTS[period]
    buckets: list[tuple[str, Optional[DateRange]]] = []

    if period == StatsPeriod.DAILY:
        for back in range(count - 1, -1, -1):
            day = reference - timedelta(days=back)
            buckets.append((WEEKDAY_LABELS[day.weekday()], DateRange.from_dates(day, day)))

    elif period == StatsPeriod.WEEKLY:
        monday = start_of_week(reference)
        for back in range(count - 1, -1, -1):
            start = monday - timedelta(weeks=back)
            buckets.append((
                f"W{count - back}",
                DateRange.from_dates(start, start + timedelta(days=6)),
            ))

    elif period == StatsPeriod.MONTHLY:
        for back in range(count - 1, -1, -1):
            start = shift_months(reference, -back)
            buckets.append((
                MONTH_LABELS[start.month - 1],
                DateRange.from_dates(start, end_of_month(start)),
            ))

    elif period == StatsPeriod.YEARLY:
        for back in range(count - 1, -1, -1):
            year = reference.year - back
            buckets.append((
                str(year),
                DateRange.from_dates(date(year, 1, 1), date(year, 12, 31)),
            ))

    else:
        buckets.append((TOTAL_LABEL, None))

    return buckets
