"""Monthly insight orchestration over the entry and insight stores.

Per (user, month) an insight is produced at most once. A stored insight is
served as is; a month without entries gets a canned message that is never
persisted; otherwise the summarizer runs and the text is stored under the
``(user_id, month)`` unique constraint. When two requests race, the loser
drops its text and serves the winner's row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Protocol

from sqlalchemy.exc import IntegrityError

from moodjournal.core.errors import Conflict
from moodjournal.domains.insights.models import MonthlyInsight
from moodjournal.domains.insights.prompt import EMPTY_MONTH_MESSAGE, build_monthly_prompt
from moodjournal.domains.journal.services import journal_service
from moodjournal.domains.stats import days
from moodjournal.domains.stats.aggregates import DEFAULT_TOP_TAGS, aggregate
from moodjournal.extensions import db

logger = logging.getLogger(__name__)

STATUS_STORED = "stored"
STATUS_EMPTY = "empty"
STATUS_GENERATED = "generated"


class Summarizer(Protocol):
    def summarize(self, prompt: str, *, user_id: Optional[int] = None) -> str: ...


@dataclass(frozen=True)
class InsightResult:
    month: str
    text: str
    status: str
    total_entries: int = 0
    average_mood: Decimal = Decimal("0.00")
    created_at: Optional[datetime] = None

    def as_dict(self) -> dict:
        return {
            "month": self.month,
            "insight": self.text,
            "status": self.status,
            "total_entries": self.total_entries,
            "average_mood": float(self.average_mood),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row: MonthlyInsight) -> "InsightResult":
        return cls(
            month=row.month,
            text=row.content,
            status=STATUS_STORED,
            total_entries=row.total_entries or 0,
            average_mood=Decimal(str(row.avg_mood or 0)).quantize(Decimal("0.01")),
            created_at=row.created_at,
        )


def find_insight(user_id: int, month_key: str) -> Optional[MonthlyInsight]:
    return MonthlyInsight.query.filter_by(user_id=user_id, month=month_key).first()


def create_insight(
    user_id: int,
    month_key: str,
    text: str,
    total_entries: int,
    avg_mood: Decimal,
) -> MonthlyInsight:
    """Persist an insight; raises ``Conflict`` if the month already has one."""
    row = MonthlyInsight(
        user_id=user_id,
        month=month_key,
        content=text,
        total_entries=total_entries,
        avg_mood=avg_mood,
    )
    db.session.add(row)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict(f"insight for {month_key} already exists") from exc
    return row


class MonthlyInsightService:
    def __init__(
        self,
        summarizer: Summarizer,
        *,
        offset: timezone,
        top_n: int = DEFAULT_TOP_TAGS,
    ) -> None:
        self.summarizer = summarizer
        self.offset = offset
        self.top_n = top_n

    def get_monthly_insight(
        self,
        user_id: int,
        month_key: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> InsightResult:
        """
        Serve the stored insight for the month, generating it on first request.

        ``month_key`` defaults to the current journal month.

        Raises:
            InvalidInput: malformed ``month_key``
            SummarizerUnavailable: every provider failed; nothing is stored
            SummarizerMalformed: every provider replied without usable text
        """
        if not month_key:
            month_key = days.month_key(days.today(now or days.utcnow(), self.offset))
        year, month = days.parse_month_key(month_key)
        month_key = f"{year:04d}-{month:02d}"

        stored = find_insight(user_id, month_key)
        if stored:
            return InsightResult.from_row(stored)

        start, end = days.month_bounds(year, month)
        entries = journal_service.find_entries_in_range(user_id, start, end)
        if not entries:
            return InsightResult(month=month_key, text=EMPTY_MONTH_MESSAGE, status=STATUS_EMPTY)

        agg = aggregate(entries, start, end, top_n=self.top_n)
        prompt = build_monthly_prompt(entries, month_key, agg)
        text = self.summarizer.summarize(prompt, user_id=user_id)

        try:
            row = create_insight(user_id, month_key, text, agg.total_entries, agg.average_mood)
        except Conflict:
            logger.info("Insight for user %s %s stored concurrently; serving stored copy", user_id, month_key)
            winner = find_insight(user_id, month_key)
            if winner is None:
                raise
            return InsightResult.from_row(winner)

        logger.info("Generated insight for user %s %s", user_id, month_key)
        return InsightResult(
            month=month_key,
            text=row.content,
            status=STATUS_GENERATED,
            total_entries=agg.total_entries,
            average_mood=agg.average_mood,
            created_at=row.created_at,
        )


def insight_service_from_app(app) -> MonthlyInsightService:
    """Service wired with the app's injected summarizer and journal settings."""
    return MonthlyInsightService(
        app.extensions["insight_summarizer"],
        offset=days.offset_from_config(app.config),
        top_n=int(app.config.get("TOP_TAGS_LIMIT", DEFAULT_TOP_TAGS)),
    )
