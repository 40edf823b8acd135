"""
Periods -- reporting windows over transaction instants.

Responsibility:
    Converts calendar requests (a year/month in the reporting time zone, an
    explicit start/end pair) into inclusive UTC instant windows that the
    selectors can compare against stored ``transaction_date`` values.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All instants leaving this module are timezone-aware UTC.  Naive
      datetimes are interpreted as UTC.
    - A monthly window runs from 00:00:00 on day 1 to 23:59:59 on the last
      day, both inclusive, in the reporting time zone.

Failure modes:
    - ValidationError for a month outside 1..12, a year outside
      MINYEAR..MAXYEAR (or a month whose bounds fall outside it once
      shifted to UTC), or start > end.
    - zoneinfo.ZoneInfoNotFoundError for an unknown time zone name.
"""

import calendar
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo

from ledger_kernel.exceptions import ValidationError


def resolve_zone(name: str) -> tzinfo:
    """Return the tzinfo for an IANA zone name."""
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


def to_utc(instant: datetime) -> datetime:
    """Normalize an instant to aware UTC (naive means UTC)."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive [start, end] window of UTC instants."""

    start: datetime
    end: datetime


def window(start: datetime, end: datetime) -> DateWindow:
    """Build a window from two instants.

    Raises:
        ValidationError: If start is after end.
    """
    start_utc, end_utc = to_utc(start), to_utc(end)
    if start_utc > end_utc:
        raise ValidationError({"startDate": "Start date must not be after end date"})
    return DateWindow(start_utc, end_utc)


def month_window(year: int, month: int, zone: str | tzinfo = "UTC") -> DateWindow:
    """
    The calendar month in ``zone`` as a UTC window.

    Args:
        year: Four-digit year.
        month: 1..12.
        zone: IANA zone name or tzinfo.

    Raises:
        ValidationError: If month or year is out of range.
    """
    errors = {}
    if not MINYEAR <= year <= MAXYEAR:
        errors["year"] = f"Year must be between {MINYEAR} and {MAXYEAR}"
    if not 1 <= month <= 12:
        errors["month"] = "Month must be between 1 and 12"
    if errors:
        raise ValidationError(errors)

    tz = resolve_zone(zone) if isinstance(zone, str) else zone
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=tz)
    end = datetime.combine(
        datetime(year, month, last_day).date(), time(23, 59, 59), tzinfo=tz
    )
    try:
        return DateWindow(to_utc(start), to_utc(end))
    except OverflowError:
        # January of year 1 east of UTC, December of 9999 west of it
        raise ValidationError(
            {"year": "Month falls outside the supported date range"}
        ) from None


def month_label(year: int, month: int) -> str:
    """Upper-case month name and year, e.g. ``MARCH 2024``."""
    return f"{calendar.month_name[month].upper()} {year}"
