"""Journal domain services."""

from moodjournal.domains.journal.services.journal_service import (
    delete_entry,
    entry_days,
    find_entries_in_range,
    get_entry,
    get_entry_for_day,
    list_entries,
    upsert_entry,
)

__all__ = [
    "upsert_entry",
    "get_entry",
    "get_entry_for_day",
    "find_entries_in_range",
    "entry_days",
    "list_entries",
    "delete_entry",
]
