"""Consecutive-day streaks over journal days."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence


@dataclass(frozen=True)
class Streaks:
    current: int = 0
    longest: int = 0

    def as_dict(self) -> dict:
        return {"current_streak": self.current, "longest_streak": self.longest}


def compute_streaks(days: Sequence[date], today: date) -> Streaks:
    """Streaks from deduplicated days sorted newest first.

    The current run only counts when the newest day is today or yesterday.
    """
    if not days:
        return Streaks()

    longest = 1
    run = 1
    current = 0
    anchored = (today - days[0]).days in (0, 1)
    for prev, day in zip(days, days[1:]):
        if (prev - day).days == 1:
            run += 1
        else:
            if anchored and not current:
                current = run
            longest = max(longest, run)
            run = 1
    longest = max(longest, run)
    if anchored and not current:
        current = run
    return Streaks(current=current, longest=longest)


def streaks_for_days(days: Iterable[date], today: date) -> Streaks:
    return compute_streaks(sorted(set(days), reverse=True), today)
