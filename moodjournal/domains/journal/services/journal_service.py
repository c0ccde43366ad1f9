"""Journal entry store: one entry per (user, journal day)."""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

from flask import current_app
from sqlalchemy import extract
from sqlalchemy.exc import IntegrityError

from moodjournal.core.errors import InvalidInput, NotFound
from moodjournal.domains.journal.models import NOTE_COLUMN_LENGTH, JournalEntry
from moodjournal.domains.stats.days import month_bounds, parse_month_key
from moodjournal.extensions import db

logger = logging.getLogger(__name__)

MOOD_MIN = 1
MOOD_MAX = 5


def upsert_entry(
    user_id: int,
    day: date,
    mood_score: int,
    note: Optional[str] = None,
    tags: Optional[Sequence[str]] = None,
    *,
    today: date,
) -> Tuple[JournalEntry, bool]:
    """Create or overwrite the user's entry for ``day``; returns ``(entry, created)``."""
    mood = _validate_mood(mood_score)
    note_val = _validate_note(note)
    tag_list = _validate_tags(tags)
    if day > today:
        raise InvalidInput("entries cannot be recorded for future days", code="future_date")

    entry = get_entry_for_day(user_id, day)
    if entry:
        _apply(entry, mood, note_val, tag_list)
        db.session.commit()
        return entry, False

    entry = JournalEntry(user_id=user_id, entry_date=day)
    _apply(entry, mood, note_val, tag_list)
    db.session.add(entry)
    try:
        db.session.commit()
        return entry, True
    except IntegrityError:
        # Lost the insert race on (user_id, entry_date); the winner's row becomes an update.
        db.session.rollback()
        logger.info("Concurrent insert for user %s on %s; retrying as update", user_id, day)

    entry = get_entry_for_day(user_id, day)
    if not entry:
        raise InvalidInput("entry could not be saved", code="conflict")
    _apply(entry, mood, note_val, tag_list)
    db.session.commit()
    return entry, False


def get_entry(user_id: int, entry_id: int) -> Optional[JournalEntry]:
    return JournalEntry.query.filter_by(id=entry_id, user_id=user_id).first()


def get_entry_for_day(user_id: int, day: date) -> Optional[JournalEntry]:
    return JournalEntry.query.filter_by(user_id=user_id, entry_date=day).first()


def find_entries_in_range(user_id: int, start: date, end: date) -> List[JournalEntry]:
    return (
        JournalEntry.query.filter(
            JournalEntry.user_id == user_id,
            JournalEntry.entry_date >= start,
            JournalEntry.entry_date <= end,
        )
        .order_by(JournalEntry.entry_date.asc())
        .all()
    )


def entry_days(user_id: int) -> List[date]:
    """Every day the user has an entry on, newest first."""
    rows = (
        db.session.query(JournalEntry.entry_date)
        .filter(JournalEntry.user_id == user_id)
        .order_by(JournalEntry.entry_date.desc())
        .all()
    )
    return [row.entry_date for row in rows]


def list_entries(
    user_id: int,
    *,
    month: Optional[str] = None,
    year: Optional[int] = None,
    limit: int = 31,
    offset: int = 0,
) -> Tuple[List[JournalEntry], int]:
    query = JournalEntry.query.filter_by(user_id=user_id)
    if month:
        start, end = month_bounds(*parse_month_key(month))
        query = query.filter(JournalEntry.entry_date >= start, JournalEntry.entry_date <= end)
    elif year:
        query = query.filter(extract("year", JournalEntry.entry_date) == year)
    total = query.count()
    entries = query.order_by(JournalEntry.entry_date.desc()).offset(offset).limit(limit).all()
    return entries, total


def delete_entry(user_id: int, entry_id: int, *, today: date) -> None:
    """Delete an owned entry; only today's entry may be removed."""
    entry = get_entry(user_id, entry_id)
    if not entry:
        raise NotFound("entry_not_found")
    if entry.entry_date != today:
        raise InvalidInput("only today's entry can be deleted", code="only_today_deletable")
    db.session.delete(entry)
    db.session.commit()


def _apply(entry: JournalEntry, mood: int, note: Optional[str], tags: List[str]) -> None:
    entry.mood_score = mood
    entry.note = note
    entry.tags = tags


def _validate_mood(mood: object) -> int:
    if isinstance(mood, bool):
        raise InvalidInput("mood_score must be an integer between 1 and 5", code="invalid_mood")
    try:
        mood_int = int(mood)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidInput("mood_score must be an integer between 1 and 5", code="invalid_mood")
    if mood_int != mood or not MOOD_MIN <= mood_int <= MOOD_MAX:
        raise InvalidInput("mood_score must be an integer between 1 and 5", code="invalid_mood")
    return mood_int


def _validate_note(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    note = note.strip()
    limit = min(int(current_app.config.get("NOTE_MAX_LENGTH", NOTE_COLUMN_LENGTH)), NOTE_COLUMN_LENGTH)
    if len(note) > limit:
        raise InvalidInput(f"note must be at most {limit} characters", code="note_too_long")
    return note or None


def _validate_tags(tags: Optional[Sequence[str]]) -> List[str]:
    # Tags are a set per entry; first-seen order is kept.
    tag_list = list(dict.fromkeys(t for t in (tags or []) if t))
    limit = current_app.config.get("TAGS_MAX_COUNT", 5)
    if len(tag_list) > limit:
        raise InvalidInput(f"at most {limit} tags are allowed", code="too_many_tags")
    return tag_list
