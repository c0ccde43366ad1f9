"""Stats read models composed from the entry store, aggregates and streaks.

Streaks always come from the user's full history, so a monthly view still
reports the live current streak.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from moodjournal.domains.journal.models import JournalEntry
from moodjournal.domains.journal.services import journal_service
from moodjournal.domains.stats import days
from moodjournal.domains.stats.aggregates import aggregate, round_mood
from moodjournal.domains.stats.streaks import Streaks, compute_streaks

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def streak_stats(user_id: int, now: datetime, offset: timezone) -> Streaks:
    return compute_streaks(journal_service.entry_days(user_id), days.today(now, offset))


def monthly_stats(
    user_id: int,
    year: int,
    month: int,
    now: datetime,
    offset: timezone,
    *,
    top_n: int = 5,
) -> dict:
    start, end = days.month_bounds(year, month)
    entries = journal_service.find_entries_in_range(user_id, start, end)
    result = aggregate(entries, start, end, top_n=top_n).as_dict()
    result["month"] = f"{year:04d}-{month:02d}"
    result.update(streak_stats(user_id, now, offset).as_dict())
    return result


def range_stats(
    user_id: int,
    start: date,
    end: date,
    now: datetime,
    offset: timezone,
    *,
    top_n: int = 5,
) -> dict:
    entries = journal_service.find_entries_in_range(user_id, start, end)
    result = aggregate(entries, start, end, top_n=top_n).as_dict()
    result.update(streak_stats(user_id, now, offset).as_dict())
    return result


def weekly_stats(user_id: int, day: Optional[date], now: datetime, offset: timezone) -> dict:
    """Monday..Sunday view of the week containing ``day`` (this week by default)."""
    anchor = day or days.today(now, offset)
    monday, sunday = days.week_bounds(anchor)
    by_day = {e.entry_date: e for e in journal_service.find_entries_in_range(user_id, monday, sunday)}
    week = []
    for i, name in enumerate(DAY_NAMES):
        current = monday + timedelta(days=i)
        entry = by_day.get(current)
        week.append(
            {
                "date": current.isoformat(),
                "day_name": name,
                "mood_score": entry.mood_score if entry else None,
                "has_entry": entry is not None,
            }
        )
    total = sum(e.mood_score for e in by_day.values())
    return {
        "start_date": monday.isoformat(),
        "end_date": sunday.isoformat(),
        "days": week,
        "total_entries": len(by_day),
        "average_mood": float(round_mood(total, len(by_day))),
    }


def overview(user_id: int, now: datetime, offset: timezone, *, top_n: int = 5) -> dict:
    """All-time aggregate plus first entry date and streaks."""
    entries = (
        JournalEntry.query.filter_by(user_id=user_id).order_by(JournalEntry.entry_date.asc()).all()
    )
    today = days.today(now, offset)
    if entries:
        start, end = entries[0].entry_date, max(entries[-1].entry_date, today)
    else:
        start = end = today
    result = aggregate(entries, start, end, top_n=top_n).as_dict()
    result["first_entry_date"] = entries[0].entry_date.isoformat() if entries else None
    result.update(compute_streaks(sorted({e.entry_date for e in entries}, reverse=True), today).as_dict())
    return result
