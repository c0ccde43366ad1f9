"""Insight domain tasks: monthly batch generation across users."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from flask import Flask, current_app

from moodjournal.core.errors import JournalError
from moodjournal.domains.stats import days

logger = logging.getLogger(__name__)

OUTCOME_GENERATED = "generated"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


@dataclass
class BatchReport:
    month: str
    generated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.generated + self.skipped + self.failed

    def as_dict(self) -> dict:
        return {
            "month": self.month,
            "processed": self.processed,
            "generated": self.generated,
            "skipped": self.skipped,
            "failed": self.failed,
            "errors": list(self.errors),
        }


def _generate_for_user(app: Flask, user_id: int, month_key: str) -> tuple[str, Optional[str]]:
    """Run one user's insight in a fresh app context; returns ``(outcome, error)``."""
    from moodjournal.domains.insights.services import (
        STATUS_GENERATED,
        insight_service_from_app,
    )
    from moodjournal.extensions import db

    with app.app_context():
        try:
            result = insight_service_from_app(app).get_monthly_insight(user_id, month_key)
        except JournalError as exc:
            db.session.rollback()
            return OUTCOME_FAILED, f"user {user_id}: {exc.message}"
        except Exception as exc:  # one user's failure must not stop the batch
            db.session.rollback()
            logger.exception("Insight generation crashed for user %s", user_id)
            return OUTCOME_FAILED, f"user {user_id}: {exc}"
    if result.status == STATUS_GENERATED:
        return OUTCOME_GENERATED, None
    return OUTCOME_SKIPPED, None


def generate_monthly_insights(
    month_key: Optional[str] = None,
    *,
    batch_size: Optional[int] = None,
    pause_seconds: Optional[float] = None,
) -> BatchReport:
    """
    Generate the month's insight for every active user.

    Users are processed in batches of ``batch_size`` on a bounded thread pool,
    sleeping ``pause_seconds`` between batches to respect provider rate limits.
    Users who already have an insight, or wrote nothing that month, count as
    skipped.

    Args:
        month_key: ``YYYY-MM``; defaults to the previous journal month
        batch_size: concurrent users per batch (``INSIGHT_BATCH_SIZE``)
        pause_seconds: sleep between batches (``INSIGHT_BATCH_PAUSE_SECONDS``)

    Returns:
        BatchReport with per-outcome counts and error strings
    """
    from moodjournal.core.users.models import User

    app = current_app._get_current_object()
    config = app.config
    if not month_key:
        month_key = days.previous_month_key(days.reference_today(config))
    year, month = days.parse_month_key(month_key)
    month_key = f"{year:04d}-{month:02d}"
    size = max(int(batch_size or config.get("INSIGHT_BATCH_SIZE", 5)), 1)
    pause = float(config.get("INSIGHT_BATCH_PAUSE_SECONDS", 2) if pause_seconds is None else pause_seconds)

    user_ids = [
        row.id
        for row in User.query.with_entities(User.id).filter(User.is_active.is_(True)).order_by(User.id).all()
    ]
    report = BatchReport(month=month_key)
    logger.info("Generating %s insights for %d users in batches of %d", month_key, len(user_ids), size)

    with ThreadPoolExecutor(max_workers=size, thread_name_prefix="insights") as pool:
        for start in range(0, len(user_ids), size):
            batch = user_ids[start : start + size]
            outcomes = pool.map(lambda uid: _generate_for_user(app, uid, month_key), batch)
            for outcome, error in outcomes:
                if outcome == OUTCOME_GENERATED:
                    report.generated += 1
                elif outcome == OUTCOME_SKIPPED:
                    report.skipped += 1
                else:
                    report.failed += 1
                    report.errors.append(error or "unknown error")
                    logger.warning("Insight batch failure: %s", error)
            if pause > 0 and start + size < len(user_ids):
                time.sleep(pause)

    logger.info("Monthly insight batch complete: %s", report.as_dict())
    return report
