"""Day-granular calendar arithmetic.

Every ledger key is the UTC-midnight timestamp of a day. All conversions
between dates and keys go through ``day_key`` / ``date_from_key`` so that
lookups never drift.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta, timezone

SECONDS_PER_DAY = 86400


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def day_key(value: date | datetime) -> int:
    """Return the UTC-midnight timestamp of the day containing ``value``."""
    d = _as_date(value)
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp())


def date_from_key(ts: int) -> date:
    return datetime.fromtimestamp(ts, tz=timezone.utc).date()


def days_in_month(value: date | datetime) -> int:
    d = _as_date(value)
    return calendar.monthrange(d.year, d.month)[1]


def start_of_month(value: date | datetime) -> date:
    return _as_date(value).replace(day=1)


def add_days(value: date | datetime, days: int) -> date:
    return _as_date(value) + timedelta(days=days)


def add_months(value: date | datetime, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    d = _as_date(value)
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def same_year_month(a: date | datetime, b: date | datetime) -> bool:
    a, b = _as_date(a), _as_date(b)
    return (a.year, a.month) == (b.year, b.month)


def is_after_by_year_month(a: date | datetime, b: date | datetime) -> bool:
    """True if ``a``'s (year, month) is strictly after ``b``'s."""
    a, b = _as_date(a), _as_date(b)
    return (a.year, a.month) > (b.year, b.month)


def is_before_by_year_month(a: date | datetime, b: date | datetime) -> bool:
    """True if ``a``'s (year, month) is strictly before ``b``'s."""
    a, b = _as_date(a), _as_date(b)
    return (a.year, a.month) < (b.year, b.month)


def next_midnight(now: datetime) -> datetime:
    """Start of the UTC day following ``now``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(timezone.utc).date()
    tomorrow = today + timedelta(days=1)
    return datetime(tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=timezone.utc)


def month_days(value: date | datetime, count: int | None = None) -> list[int]:
    """Day keys for days 1..count of ``value``'s month (whole month by default)."""
    start = day_key(start_of_month(value))
    if count is None:
        count = days_in_month(value)
    return [start + SECONDS_PER_DAY * i for i in range(count)]
