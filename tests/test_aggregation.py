"""Tests for the aggregation engine."""

import pytest
from datetime import date

from conftest import make_entry
from ledgerbook.models import DateRange, EntryType, StatsPeriod
from ledgerbook.queries import (
    filter_by_date,
    filter_by_range,
    period_series,
    period_totals,
    recent_entries,
    totals,
)


@pytest.fixture
def entries():
    return [
        make_entry("a", 100, EntryType.INCOME, "2024-01-31"),
        make_entry("b", 40, EntryType.EXPENSE, "2024-02-01"),
        make_entry("c", 25, EntryType.EXPENSE, "2024-02-29"),
        make_entry("d", 300, EntryType.INCOME, "2024-02-15"),
        make_entry("e", 10, EntryType.EXPENSE, "2024-03-01"),
    ]


class TestTotals:
    """Tests for totals."""

    def test_income_and_expense(self):
        """Test one income and one expense on the same day."""
        result = totals([
            make_entry("a", 100, EntryType.INCOME, "2024-01-01"),
            make_entry("b", 40, EntryType.EXPENSE, "2024-01-01"),
        ])
        assert (result.income, result.expense, result.balance) == (100, 40, 60)

    def test_empty_collection(self):
        """Test that no entries give zero totals."""
        result = totals([])
        assert (result.income, result.expense, result.balance) == (0, 0, 0)

    def test_order_does_not_matter(self, entries):
        """Test totals are independent of entry order."""
        assert totals(entries) == totals(list(reversed(entries)))


class TestFilters:
    """Tests for date filtering."""

    def test_filter_by_date(self, entries):
        """Test exact-day filtering."""
        assert [e.id for e in filter_by_date(entries, "2024-02-01")] == ["b"]

    def test_filter_by_date_no_match(self, entries):
        """Test a day without entries yields an empty list."""
        assert filter_by_date(entries, "2030-01-01") == []

    def test_filter_by_range_is_inclusive(self, entries):
        """Test both range bounds are included."""
        result = filter_by_range(entries, DateRange(start="2024-02-01", end="2024-02-29"))
        assert [e.id for e in result] == ["b", "c", "d"]

    def test_inverted_range_is_empty(self, entries):
        """Test a range with start after end matches nothing."""
        assert filter_by_range(entries, DateRange(start="2024-03-01", end="2024-01-01")) == []


class TestPeriods:
    """Tests for period totals and series."""

    def test_monthly_totals_leap_february(self, entries):
        """Test February 2024 totals include the 29th and nothing outside the month."""
        result = period_totals(StatsPeriod.MONTHLY, entries, date(2024, 2, 15))
        assert result.income == 300
        assert result.expense == 65

    def test_total_period_covers_everything(self, entries):
        """Test the total period sums every entry."""
        assert period_totals(StatsPeriod.TOTAL, entries, date(2024, 2, 15)) == totals(entries)

    def test_daily_series_last_bucket_is_reference(self, entries):
        """Test the daily series ends with the reference day."""
        series = period_series(StatsPeriod.DAILY, entries, date(2024, 2, 29))
        assert len(series) == 7
        assert series[-1].label == "Thu"
        assert series[-1].expense == 25
        assert series[0].expense == 0

    def test_monthly_series(self, entries):
        """Test each monthly bucket sums its own month."""
        series = period_series(StatsPeriod.MONTHLY, entries, date(2024, 3, 10))
        by_label = {bucket.label: bucket for bucket in series}
        assert by_label["Jan"].income == 100
        assert by_label["Feb"].income == 300
        assert by_label["Feb"].expense == 65
        assert by_label["Mar"].expense == 10

    def test_total_series(self, entries):
        """Test the total series is one bucket labelled All Time."""
        series = period_series(StatsPeriod.TOTAL, entries, date(2024, 3, 10))
        assert len(series) == 1
        assert series[0].label == "All Time"
        assert series[0].income == 400

    def test_series_for_empty_collection(self):
        """Test a series over no entries is all zeros."""
        series = period_series(StatsPeriod.WEEKLY, [], date(2024, 1, 7))
        assert len(series) == 4
        assert all(bucket.income == 0 and bucket.expense == 0 for bucket in series)


class TestRecentEntries:
    """Tests for the home screen list."""

    def test_newest_first_and_limited(self):
        """Test today's entries are sorted by creation time and capped."""
        entries = [
            make_entry("old", 1, day="2024-01-01", created_at=1),
            make_entry("new", 1, day="2024-01-01", created_at=3),
            make_entry("mid", 1, day="2024-01-01", created_at=2),
            make_entry("other-day", 1, day="2024-01-02", created_at=9),
        ]
        result = recent_entries(entries, "2024-01-01", limit=2)
        assert [e.id for e in result] == ["new", "mid"]
