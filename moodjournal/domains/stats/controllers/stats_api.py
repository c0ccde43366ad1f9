"""Stats JSON API."""

from __future__ import annotations

from typing import Optional

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from moodjournal.core.errors import InvalidInput
from moodjournal.domains.stats import days
from moodjournal.domains.stats.services import stats_service

stats_api_bp = Blueprint("stats_api", __name__)


def _clock():
    return days.utcnow(), days.offset_from_config(current_app.config)


def _top_n() -> int:
    return int(current_app.config.get("TOP_TAGS_LIMIT", 5))


def _optional_day(name: str):
    value: Optional[str] = request.args.get(name)
    return days.parse_day(value) if value else None


@stats_api_bp.get("/monthly")
@jwt_required()
def monthly():
    user_id = int(get_jwt_identity())
    now, offset = _clock()
    month = request.args.get("month") or days.month_key(days.today(now, offset))
    year, month_num = days.parse_month_key(month)
    result = stats_service.monthly_stats(user_id, year, month_num, now, offset, top_n=_top_n())
    return jsonify({"ok": True, "stats": result})


@stats_api_bp.get("/weekly")
@jwt_required()
def weekly():
    user_id = int(get_jwt_identity())
    now, offset = _clock()
    result = stats_service.weekly_stats(user_id, _optional_day("date"), now, offset)
    return jsonify({"ok": True, "stats": result})


@stats_api_bp.get("/streak")
@jwt_required()
def streak():
    user_id = int(get_jwt_identity())
    now, offset = _clock()
    return jsonify({"ok": True, **stats_service.streak_stats(user_id, now, offset).as_dict()})


@stats_api_bp.get("/overview")
@jwt_required()
def overview():
    user_id = int(get_jwt_identity())
    now, offset = _clock()
    return jsonify({"ok": True, "stats": stats_service.overview(user_id, now, offset, top_n=_top_n())})


@stats_api_bp.get("/range")
@jwt_required()
def range_view():
    user_id = int(get_jwt_identity())
    start, end = _optional_day("start_date"), _optional_day("end_date")
    if not start or not end:
        raise InvalidInput("start_date and end_date are required", code="missing_range")
    if start > end:
        raise InvalidInput("start_date must not be after end_date", code="invalid_range")
    now, offset = _clock()
    result = stats_service.range_stats(user_id, start, end, now, offset, top_n=_top_n())
    return jsonify({"ok": True, "stats": result})
