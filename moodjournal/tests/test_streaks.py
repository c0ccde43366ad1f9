from __future__ import annotations

import random
from datetime import date, timedelta

import pytest

pytestmark = pytest.mark.unit

from moodjournal.domains.stats.streaks import Streaks, compute_streaks, streaks_for_days

TODAY = date(2024, 1, 5)


def _back(*offsets: int) -> list[date]:
    return [TODAY - timedelta(days=n) for n in offsets]


def test_empty_history_has_no_streaks():
    assert compute_streaks([], TODAY) == Streaks(0, 0)


def test_run_ending_today_counts_as_current():
    assert compute_streaks(_back(0, 1, 2), TODAY) == Streaks(current=3, longest=3)


def test_run_ending_yesterday_still_counts():
    assert compute_streaks(_back(1, 2), TODAY) == Streaks(current=2, longest=2)


def test_gap_before_today_resets_current():
    assert compute_streaks(_back(2), TODAY) == Streaks(current=0, longest=1)
    assert compute_streaks(_back(2, 3, 4, 5), TODAY) == Streaks(current=0, longest=4)


def test_current_stops_at_first_gap_and_longest_scans_history():
    history = _back(0, 1, 5, 6, 7, 8, 20)
    assert compute_streaks(history, TODAY) == Streaks(current=2, longest=4)


def test_single_entry_today_is_a_streak_of_one():
    assert compute_streaks(_back(0), TODAY) == Streaks(current=1, longest=1)


def test_streaks_cross_month_and_year_boundaries():
    history = [date(2024, 1, 1), date(2023, 12, 31), date(2023, 12, 30)]
    assert compute_streaks(history, date(2024, 1, 2)) == Streaks(current=3, longest=3)


def test_streaks_for_days_dedupes_and_sorts():
    unsorted = _back(2, 0, 1, 1, 0)
    assert streaks_for_days(unsorted, TODAY) == Streaks(current=3, longest=3)


def test_longest_is_never_below_current():
    rng = random.Random(7)
    for _ in range(200):
        picked = {TODAY - timedelta(days=rng.randint(0, 40)) for _ in range(rng.randint(0, 25))}
        result = streaks_for_days(picked, TODAY)
        assert result.longest >= result.current >= 0
        if not picked:
            assert result == Streaks(0, 0)


def test_as_dict_shape():
    assert Streaks(2, 5).as_dict() == {"current_streak": 2, "longest_streak": 5}
