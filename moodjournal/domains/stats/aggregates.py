"""Period aggregates over journal entries: average, distribution, top tags."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

MOOD_SCORES = (1, 2, 3, 4, 5)
DEFAULT_TOP_TAGS = 5

_TWO_PLACES = Decimal("0.01")


class EntryLike(Protocol):
    entry_date: date
    mood_score: int
    tags: Sequence[str] | None


def round_mood(total: int, count: int) -> Decimal:
    """Mean mood rounded half-up to two places; zero for no entries."""
    if not count:
        return Decimal("0.00")
    return (Decimal(total) / Decimal(count)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Aggregate:
    range_start: date
    range_end: date
    total_entries: int = 0
    average_mood: Decimal = Decimal("0.00")
    mood_distribution: Dict[int, int] = field(default_factory=lambda: {s: 0 for s in MOOD_SCORES})
    top_tags: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def most_common_mood(self) -> int | None:
        """Most frequent score, lowest score on ties."""
        if not self.total_entries:
            return None
        return max(MOOD_SCORES, key=lambda s: (self.mood_distribution[s], -s))

    def as_dict(self) -> dict:
        return {
            "start_date": self.range_start.isoformat(),
            "end_date": self.range_end.isoformat(),
            "total_entries": self.total_entries,
            "average_mood": float(self.average_mood),
            "mood_distribution": {str(s): self.mood_distribution[s] for s in MOOD_SCORES},
            "top_tags": [{"tag": tag, "count": count} for tag, count in self.top_tags],
        }


def aggregate(
    entries: Iterable[EntryLike],
    range_start: date,
    range_end: date,
    top_n: int = DEFAULT_TOP_TAGS,
) -> Aggregate:
    selected = sorted(
        (e for e in entries if range_start <= e.entry_date <= range_end),
        key=lambda e: e.entry_date,
    )
    distribution = {s: 0 for s in MOOD_SCORES}
    total = 0
    # Counter keeps insertion order, so equal counts stay in first-seen order.
    tags: Counter[str] = Counter()
    for entry in selected:
        distribution[entry.mood_score] = distribution.get(entry.mood_score, 0) + 1
        total += entry.mood_score
        for tag in entry.tags or ():
            tags[tag] += 1

    ranked = sorted(tags.items(), key=lambda item: -item[1])
    return Aggregate(
        range_start=range_start,
        range_end=range_end,
        total_entries=len(selected),
        average_mood=round_mood(total, len(selected)),
        mood_distribution=distribution,
        top_tags=ranked[: max(top_n, 0)],
    )
