"""Journal mappers for DTO responses."""

from __future__ import annotations

from moodjournal.domains.journal.models import JournalEntry
from moodjournal.domains.journal.schemas.journal_schemas import JournalEntryResponse


def map_entry(entry: JournalEntry) -> dict:
    return JournalEntryResponse(
        id=entry.id,
        entry_date=entry.entry_date,
        mood_score=entry.mood_score,
        mood_label=entry.mood_label,
        note=entry.note,
        tags=list(entry.tags or []),
        created_at=entry.created_at.isoformat() if entry.created_at else "",
        updated_at=entry.updated_at.isoformat() if entry.updated_at else "",
    ).model_dump(mode="json")
