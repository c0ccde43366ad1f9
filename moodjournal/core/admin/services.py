"""Admin console read models."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, or_

from moodjournal.core.auth.models import utc_timestamp
from moodjournal.core.users.models import User
from moodjournal.core.users.schemas import serialize_user
from moodjournal.core.utils.pagination import paginate
from moodjournal.domains.insights.models import AIUsage, MonthlyInsight
from moodjournal.domains.insights.usage import serialize_usage, usage_statistics
from moodjournal.domains.journal.models import JournalEntry
from moodjournal.extensions import db

DASHBOARD_WINDOW_DAYS = 30


def dashboard(now: Optional[datetime] = None) -> dict:
    since = (now or utc_timestamp()) - timedelta(days=DASHBOARD_WINDOW_DAYS)
    total_users = User.query.count()
    active_users = User.query.filter(User.is_active.is_(True)).count()
    recent_users = User.query.order_by(User.created_at.desc(), User.id.desc()).limit(5).all()
    recent_calls = AIUsage.query.order_by(AIUsage.created_at.desc(), AIUsage.id.desc()).limit(10).all()
    return {
        "overview": {
            "total_users": total_users,
            "active_users": active_users,
            "inactive_users": total_users - active_users,
            "total_entries": JournalEntry.query.count(),
            "total_insights": MonthlyInsight.query.count(),
            "total_ai_calls": AIUsage.query.count(),
        },
        "ai_usage": {
            "last_30_days": usage_statistics(AIUsage.query.filter(AIUsage.created_at >= since)),
            "recent": [serialize_usage(row) for row in recent_calls],
        },
        "recent_users": [serialize_user(u) for u in recent_users],
    }


def list_users(search: Optional[str], page: int, per_page: int) -> dict:
    query = User.query
    if search:
        like = f"%{search.strip().lower()}%"
        query = query.filter(or_(func.lower(User.email).like(like), func.lower(User.full_name).like(like)))
    result = paginate(query.order_by(User.created_at.desc(), User.id.desc()), page, per_page)
    result["items"] = [serialize_user(u) for u in result["items"]]
    return result


def user_detail(user: User) -> dict:
    detail = serialize_user(user)
    detail["counts"] = {
        "entries": JournalEntry.query.filter_by(user_id=user.id).count(),
        "insights": MonthlyInsight.query.filter_by(user_id=user.id).count(),
        "ai_calls": AIUsage.query.filter_by(user_id=user.id).count(),
    }
    last_entry = (
        db.session.query(func.max(JournalEntry.entry_date)).filter(JournalEntry.user_id == user.id).scalar()
    )
    detail["last_entry_date"] = last_entry.isoformat() if last_entry else None
    return detail
