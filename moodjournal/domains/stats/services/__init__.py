"""Stats domain services."""

from moodjournal.domains.stats.services.stats_service import (
    monthly_stats,
    overview,
    range_stats,
    streak_stats,
    weekly_stats,
)

__all__ = ["monthly_stats", "weekly_stats", "streak_stats", "overview", "range_stats"]
