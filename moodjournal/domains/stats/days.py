"""Journal-day arithmetic in a fixed reference offset.

A journal day is a ``datetime.date`` taken in one configured UTC offset
(``JOURNAL_UTC_OFFSET_MINUTES``, UTC+07:00 by default). The offset is a
constant, not a named zone, so daylight saving never shifts a day boundary.
Nothing here reads the machine's local timezone; the wall clock is read
only by :func:`utcnow` and passed down from there.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Mapping, Tuple

from moodjournal.core.errors import InvalidInput

DEFAULT_OFFSET_MINUTES = 420

_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")


def journal_offset(minutes: int = DEFAULT_OFFSET_MINUTES) -> timezone:
    return timezone(timedelta(minutes=int(minutes)))


def offset_from_config(config: Mapping[str, Any]) -> timezone:
    return journal_offset(config.get("JOURNAL_UTC_OFFSET_MINUTES", DEFAULT_OFFSET_MINUTES))


def utcnow() -> datetime:
    """Current instant, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def normalize(instant: datetime, offset: timezone) -> date:
    """Map an instant to its journal day; naive values are read as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(offset).date()


def today(now: datetime, offset: timezone) -> date:
    return normalize(now, offset)


def reference_today(config: Mapping[str, Any]) -> date:
    """Today's journal day under the configured offset."""
    return today(utcnow(), offset_from_config(config))


def day_start_utc(day: date, offset: timezone) -> datetime:
    """UTC instant of local midnight for ``day`` (display only)."""
    return datetime.combine(day, time.min, tzinfo=offset).astimezone(timezone.utc)


def parse_day(value: str) -> date:
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise InvalidInput(f"invalid date: {value!r}, expected YYYY-MM-DD", code="invalid_date") from exc


def parse_month_key(value: str) -> Tuple[int, int]:
    match = _MONTH_KEY.match(str(value or "").strip())
    if not match:
        raise InvalidInput(f"invalid month: {value!r}, expected YYYY-MM", code="invalid_month")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidInput(f"invalid month: {value!r}", code="invalid_month")
    return year, month


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def previous_month_key(day: date) -> str:
    return month_key(day.replace(day=1) - timedelta(days=1))


def week_bounds(day: date) -> Tuple[date, date]:
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)
