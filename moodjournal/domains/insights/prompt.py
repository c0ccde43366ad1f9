"""Prompt text for the monthly mood summary."""

from __future__ import annotations

from typing import Sequence

from moodjournal.domains.journal.models import MOOD_LABELS
from moodjournal.domains.stats.aggregates import Aggregate, EntryLike

EMPTY_MONTH_MESSAGE = (
    "You have no journal entries for this month yet. "
    "Start recording how you feel each day to receive a personal monthly insight."
)

SYSTEM_PROMPT = "You are a friendly, warm psychologist who helps people reflect on their moods."

_INSTRUCTIONS = """Please write:
1. A short overview of the person's state of mind this month (2-3 sentences).
2. The notable trends or swings in their mood.
3. 3-4 practical, easy tips to improve their wellbeing.
4. A few words of encouragement.

Keep a warm, friendly tone, like a close friend. Stay under 400 words."""


def build_monthly_prompt(entries: Sequence[EntryLike], month: str, agg: Aggregate) -> str:
    """Prompt covering the month's stats and one line per recorded day."""
    most_common = agg.most_common_mood
    if most_common is not None:
        common_line = (
            f"{MOOD_LABELS[most_common]} ({agg.mood_distribution[most_common]} days)"
        )
    else:
        common_line = "none"
    tags = ", ".join(tag for tag, _ in agg.top_tags) or "none"

    lines = []
    for entry in sorted(entries, key=lambda e: e.entry_date):
        note = (getattr(entry, "note", None) or "").strip()
        suffix = f' - "{note}"' if note else ""
        label = MOOD_LABELS.get(entry.mood_score, str(entry.mood_score))
        lines.append(f"- {entry.entry_date.isoformat()}: {label} ({entry.mood_score}){suffix}")

    return (
        f"Analyse this person's mood journal for {month} and give sincere, caring advice.\n\n"
        "Data:\n"
        f"- Days journaled: {agg.total_entries}\n"
        f"- Average mood: {agg.average_mood:.2f}/5.0\n"
        f"- Most common mood: {common_line}\n"
        f"- Frequent tags: {tags}\n\n"
        "Daily entries:\n"
        + "\n".join(lines)
        + "\n\n"
        + _INSTRUCTIONS
    )
