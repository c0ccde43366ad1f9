"""Journal domain models."""

from moodjournal.domains.journal.models.journal_entry import MOOD_LABELS, NOTE_COLUMN_LENGTH, JournalEntry

__all__ = ["JournalEntry", "MOOD_LABELS", "NOTE_COLUMN_LENGTH"]
