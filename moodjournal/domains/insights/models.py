"""Insight persistence models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from moodjournal.core.auth.models import utc_timestamp
from moodjournal.extensions import db


class MonthlyInsight(db.Model):
    __tablename__ = "monthly_insight"
    __table_args__ = (
        db.UniqueConstraint("user_id", "month", name="uq_monthly_insight_user_month"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id"), index=True, nullable=False)
    month: Mapped[str] = mapped_column(db.String(7), nullable=False)
    content: Mapped[str] = mapped_column(db.Text, nullable=False)
    total_entries: Mapped[int] = mapped_column(default=0)
    avg_mood: Mapped[float] = mapped_column(db.Numeric(4, 2), default=0)
    created_at: Mapped[datetime] = mapped_column(default=utc_timestamp, index=True)


class AIUsage(db.Model):
    """One provider attempt, successful or not."""

    __tablename__ = "ai_usage"
    __table_args__ = (
        db.Index("ix_ai_usage_user_created_at", "user_id", "created_at"),
        db.Index("ix_ai_usage_provider_created_at", "provider", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(
        db.ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )
    provider: Mapped[str] = mapped_column(db.String(32), nullable=False)
    endpoint: Mapped[str] = mapped_column(db.String(128), nullable=False, default="")
    prompt_tokens: Mapped[int | None] = mapped_column(nullable=True)
    response_tokens: Mapped[int | None] = mapped_column(nullable=True)
    total_tokens: Mapped[int | None] = mapped_column(nullable=True)
    success: Mapped[bool] = mapped_column(default=True)
    error_message: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    response_time_ms: Mapped[int | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utc_timestamp, index=True)
