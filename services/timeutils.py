"""Instant parsing and display-label helpers.

All functions are pure: the display timezone and the reference "now" are
passed in by the caller. Display strings follow the en-US conventions the
upstream dashboards use (``1/5/2025, 3:04:05 PM``) and are never parsed back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Optional, Union

InstantLike = Union[str, datetime]


class Timeframe(str, Enum):
    """Resolution class used to pick a label granularity."""

    hour = "24h"
    day = "7d"
    month = "30d"

    @property
    def days(self) -> int:
        return {Timeframe.hour: 1, Timeframe.day: 7, Timeframe.month: 30}[self]


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of ISO calendar dates (``YYYY-MM-DD``)."""

    start: str
    end: str


def parse_instant(value: InstantLike) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Strings are read as ISO 8601; a trailing ``Z`` and a missing offset both
    mean UTC. Naive datetimes are assumed to already be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            raise ValueError("Timestamp is empty.")
        if candidate.endswith(("Z", "z")):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp format: {value!r}") from exc
    else:
        raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(instant: datetime) -> str:
    """Canonical string form, e.g. ``2025-01-01T00:00:00.000Z``."""
    utc = parse_instant(instant)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _local(instant: datetime, tz: Optional[tzinfo]) -> datetime:
    return parse_instant(instant).astimezone(tz or timezone.utc)


def _hour12(value: datetime) -> tuple[int, str]:
    hour = value.hour % 12 or 12
    return hour, "AM" if value.hour < 12 else "PM"


def format_date(instant: datetime, tz: Optional[tzinfo] = None) -> str:
    local = _local(instant, tz)
    return f"{local.month}/{local.day}/{local.year}"


def format_clock(instant: datetime, tz: Optional[tzinfo] = None) -> str:
    """Time of day with seconds, e.g. ``3:04:05 PM``."""
    local = _local(instant, tz)
    hour, meridiem = _hour12(local)
    return f"{hour}:{local.minute:02d}:{local.second:02d} {meridiem}"


def format_display(instant: datetime, tz: Optional[tzinfo] = None) -> str:
    """Date and time joined the way history labels are shown."""
    return f"{format_date(instant, tz)}, {format_clock(instant, tz)}"


def format_table_timestamp(instant: datetime, tz: Optional[tzinfo] = None) -> str:
    """Date and time pair used in the first column of tabular exports."""
    return f"{format_date(instant, tz)} {format_clock(instant, tz)}"


def format_time(instant: datetime, tz: Optional[tzinfo] = None) -> str:
    """Two-digit hour and minute, e.g. ``03:04 PM``."""
    local = _local(instant, tz)
    hour, meridiem = _hour12(local)
    return f"{hour:02d}:{local.minute:02d} {meridiem}"


def format_current_time(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
    current = now if now is not None else datetime.now(timezone.utc)
    return f"Today, {format_time(current, tz)}"


def time_label(instant: datetime, timeframe: Timeframe, tz: Optional[tzinfo] = None) -> str:
    """Chart axis label for ``instant`` at the given resolution."""
    local = _local(instant, tz)
    timeframe = Timeframe(timeframe)
    if timeframe is Timeframe.hour:
        return format_time(local, tz)
    if timeframe is Timeframe.day:
        hour, meridiem = _hour12(local)
        return f"{local.strftime('%a')}, {hour:02d} {meridiem}"
    return f"{local.strftime('%b')} {local.day}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_time(
    value: Optional[InstantLike],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """Human relative string such as ``5 minutes ago``.

    Missing or unparseable input renders as ``Never``; anything older than a
    week falls back to the calendar date.
    """
    if value is None or value == "":
        return "Never"
    try:
        instant = parse_instant(value)
    except ValueError:
        return "Never"

    current = parse_instant(now) if now is not None else datetime.now(timezone.utc)
    seconds = int((current - instant).total_seconds())
    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 7:
        return _plural(days, "day")
    return format_date(instant, tz)


def _today(today: Optional[date]) -> date:
    return today if today is not None else datetime.now(timezone.utc).date()


def date_range_from_timeframe(timeframe: Timeframe, today: Optional[date] = None) -> DateRange:
    end = _today(today)
    start = end - timedelta(days=Timeframe(timeframe).days)
    return DateRange(start=start.isoformat(), end=end.isoformat())


def default_date_range(
    start: Optional[str] = None,
    end: Optional[str] = None,
    days: int = 7,
    today: Optional[date] = None,
) -> DateRange:
    """Fill a missing start (``days`` before today) or end (today)."""
    current = _today(today)
    return DateRange(
        start=start or (current - timedelta(days=days)).isoformat(),
        end=end or current.isoformat(),
    )
