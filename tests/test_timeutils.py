"""Unit tests for instant parsing and label formatting."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from services.timeutils import (
    DateRange,
    Timeframe,
    date_range_from_timeframe,
    default_date_range,
    format_current_time,
    format_display,
    format_relative_time,
    format_table_timestamp,
    format_time,
    parse_instant,
    time_label,
    to_iso,
)

UTC = timezone.utc


def test_parse_instant_accepts_z_suffix_and_offsets() -> None:
    assert parse_instant("2025-01-01T00:00:00Z") == datetime(2025, 1, 1, tzinfo=UTC)
    assert parse_instant("2025-01-01T02:00:00+02:00") == datetime(2025, 1, 1, tzinfo=UTC)


def test_parse_instant_treats_naive_values_as_utc() -> None:
    parsed = parse_instant("2025-01-01T05:30:00")

    assert parsed.tzinfo is UTC
    assert parsed.hour == 5
    assert parse_instant(datetime(2025, 1, 1)) == datetime(2025, 1, 1, tzinfo=UTC)


@pytest.mark.parametrize("value", ["", "   ", "not-a-timestamp", 1735689600])
def test_parse_instant_rejects_invalid_values(value) -> None:
    with pytest.raises(ValueError):
        parse_instant(value)


def test_to_iso_uses_millisecond_precision_and_z() -> None:
    assert to_iso(datetime(2025, 1, 1, tzinfo=UTC)) == "2025-01-01T00:00:00.000Z"
    assert to_iso(parse_instant("2025-03-04T05:06:07.891+00:00")) == "2025-03-04T05:06:07.891Z"


def test_display_formats_follow_twelve_hour_clock() -> None:
    assert format_display(datetime(2025, 6, 14, 1, 8, 2, tzinfo=UTC)) == "6/14/2025, 1:08:02 AM"
    assert format_table_timestamp(datetime(2025, 1, 2, 13, 5, 9, tzinfo=UTC)) == "1/2/2025 1:05:09 PM"
    assert format_table_timestamp(datetime(2025, 1, 1, tzinfo=UTC)) == "1/1/2025 12:00:00 AM"
    assert format_table_timestamp(datetime(2025, 1, 1, 12, tzinfo=UTC)) == "1/1/2025 12:00:00 PM"


def test_display_formats_respect_timezone() -> None:
    new_york = ZoneInfo("America/New_York")

    assert format_table_timestamp(datetime(2025, 1, 1, tzinfo=UTC), new_york) == "12/31/2024 7:00:00 PM"


def test_format_time_and_current_time() -> None:
    assert format_time(datetime(2025, 1, 1, 15, 4, tzinfo=UTC)) == "03:04 PM"
    assert format_current_time(now=datetime(2025, 1, 1, 9, 30, tzinfo=UTC)) == "Today, 09:30 AM"


def test_time_label_by_resolution() -> None:
    instant = datetime(2025, 1, 6, 15, 0, tzinfo=UTC)

    assert time_label(instant, Timeframe.hour) == "03:00 PM"
    assert time_label(instant, Timeframe.day) == "Mon, 03 PM"
    assert time_label(instant, Timeframe.month) == "Jan 6"
    assert time_label(instant, "30d") == "Jan 6"


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        (timedelta(seconds=30), "Just now"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(hours=3), "3 hours ago"),
        (timedelta(days=2), "2 days ago"),
        (timedelta(days=10), "12/31/2024"),
    ],
)
def test_format_relative_time(delta: timedelta, expected: str) -> None:
    now = datetime(2025, 1, 10, 12, 0, tzinfo=UTC)

    assert format_relative_time(now - delta, now=now) == expected


def test_format_relative_time_handles_missing_values() -> None:
    now = datetime(2025, 1, 10, 12, 0, tzinfo=UTC)

    assert format_relative_time(None, now=now) == "Never"
    assert format_relative_time("", now=now) == "Never"
    assert format_relative_time("garbage", now=now) == "Never"
    assert format_relative_time("2025-01-10T11:00:00Z", now=now) == "1 hour ago"


def test_date_range_from_timeframe() -> None:
    today = date(2025, 1, 10)

    assert date_range_from_timeframe(Timeframe.hour, today=today) == DateRange("2025-01-09", "2025-01-10")
    assert date_range_from_timeframe(Timeframe.day, today=today) == DateRange("2025-01-03", "2025-01-10")
    assert date_range_from_timeframe("30d", today=today) == DateRange("2024-12-11", "2025-01-10")


def test_default_date_range_fills_only_missing_edges() -> None:
    today = date(2025, 1, 10)

    assert default_date_range(today=today) == DateRange("2025-01-03", "2025-01-10")
    assert default_date_range(start="2024-12-01", today=today) == DateRange("2024-12-01", "2025-01-10")
    assert default_date_range(end="2025-01-05", days=2, today=today) == DateRange("2025-01-08", "2025-01-05")
