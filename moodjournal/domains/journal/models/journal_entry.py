"""One mood entry per user per journal day."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy.orm import Mapped, mapped_column

from moodjournal.core.auth.models import utc_timestamp
from moodjournal.extensions import db

NOTE_COLUMN_LENGTH = 500

MOOD_LABELS = {
    1: "Very bad",
    2: "Bad",
    3: "Neutral",
    4: "Good",
    5: "Great",
}


class JournalEntry(db.Model):
    __tablename__ = "journal_entry"
    __table_args__ = (
        db.UniqueConstraint("user_id", "entry_date", name="uq_journal_entry_user_day"),
        db.CheckConstraint("mood_score BETWEEN 1 AND 5", name="ck_journal_entry_mood_score"),
        db.Index("ix_journal_entry_user_entry_date", "user_id", "entry_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    entry_date: Mapped[date] = mapped_column(nullable=False)
    mood_score: Mapped[int] = mapped_column(db.Integer, nullable=False)
    note: Mapped[str | None] = mapped_column(db.String(NOTE_COLUMN_LENGTH))
    tags: Mapped[list] = mapped_column(db.JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_timestamp)
    updated_at: Mapped[datetime] = mapped_column(default=utc_timestamp, onupdate=utc_timestamp)

    @property
    def mood_label(self) -> str:
        return MOOD_LABELS.get(self.mood_score, "Unknown")
