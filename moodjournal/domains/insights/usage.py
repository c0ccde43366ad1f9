"""AI usage telemetry: one ``ai_usage`` row per provider attempt."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from moodjournal.domains.insights.models import AIUsage
from moodjournal.domains.insights.summarizer import Attempt
from moodjournal.extensions import db

logger = logging.getLogger(__name__)


def log_usage(
    *,
    provider: str,
    endpoint: str = "",
    user_id: Optional[int] = None,
    prompt_tokens: Optional[int] = None,
    response_tokens: Optional[int] = None,
    total_tokens: Optional[int] = None,
    success: bool = True,
    error_message: Optional[str] = None,
    response_time_ms: Optional[int] = None,
) -> AIUsage:
    if total_tokens is None and prompt_tokens is not None and response_tokens is not None:
        total_tokens = prompt_tokens + response_tokens
    row = AIUsage(
        user_id=user_id,
        provider=provider,
        endpoint=endpoint,
        prompt_tokens=prompt_tokens,
        response_tokens=response_tokens,
        total_tokens=total_tokens,
        success=success,
        error_message=error_message,
        response_time_ms=response_time_ms,
    )
    db.session.add(row)
    db.session.commit()
    return row


def record_attempt(attempt: Attempt) -> None:
    """Usage recorder wired into the summarizer; telemetry never fails a summary."""
    completion = attempt.completion
    try:
        log_usage(
            provider=attempt.provider,
            endpoint=attempt.endpoint,
            user_id=attempt.user_id,
            prompt_tokens=completion.prompt_tokens if completion else None,
            response_tokens=completion.response_tokens if completion else None,
            total_tokens=completion.total_tokens if completion else None,
            success=attempt.success,
            error_message=attempt.error,
            response_time_ms=attempt.response_time_ms,
        )
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not record AI usage for provider %s", attempt.provider)


def filtered_usage_query(
    *,
    user_id: Optional[int] = None,
    provider: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
):
    query = AIUsage.query
    if user_id is not None:
        query = query.filter(AIUsage.user_id == user_id)
    if provider:
        query = query.filter(AIUsage.provider == provider)
    if start:
        query = query.filter(AIUsage.created_at >= datetime.combine(start, time.min))
    if end:
        query = query.filter(AIUsage.created_at < datetime.combine(end + timedelta(days=1), time.min))
    return query


def usage_statistics(query) -> Dict[str, Any]:
    """Totals, success rate, token sums and latency for an ``AIUsage`` query."""
    subq = query.order_by(None).subquery()
    row = db.session.query(
        func.count(subq.c.id),
        func.sum(case((subq.c.success.is_(True), 1), else_=0)),
        func.sum(subq.c.prompt_tokens),
        func.sum(subq.c.response_tokens),
        func.sum(subq.c.total_tokens),
        func.avg(subq.c.response_time_ms),
    ).one()
    total, successes, prompt_tokens, response_tokens, total_tokens, avg_ms = row
    total = int(total or 0)
    successes = int(successes or 0)

    by_provider = [
        {
            "provider": provider,
            "calls": int(calls or 0),
            "successful_calls": int(ok or 0),
            "total_tokens": int(tokens or 0),
        }
        for provider, calls, ok, tokens in db.session.query(
            subq.c.provider,
            func.count(subq.c.id),
            func.sum(case((subq.c.success.is_(True), 1), else_=0)),
            func.sum(subq.c.total_tokens),
        )
        .group_by(subq.c.provider)
        .order_by(subq.c.provider)
        .all()
    ]
    return {
        "total_calls": total,
        "successful_calls": successes,
        "failed_calls": total - successes,
        "success_rate": round(successes * 100.0 / total, 2) if total else 0.0,
        "total_prompt_tokens": int(prompt_tokens or 0),
        "total_response_tokens": int(response_tokens or 0),
        "total_tokens": int(total_tokens or 0),
        "avg_response_time_ms": round(float(avg_ms), 2) if avg_ms is not None else 0.0,
        "by_provider": by_provider,
    }


def serialize_usage(row: AIUsage) -> dict:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "provider": row.provider,
        "endpoint": row.endpoint,
        "prompt_tokens": row.prompt_tokens,
        "response_tokens": row.response_tokens,
        "total_tokens": row.total_tokens,
        "success": row.success,
        "error_message": row.error_message,
        "response_time_ms": row.response_time_ms,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
