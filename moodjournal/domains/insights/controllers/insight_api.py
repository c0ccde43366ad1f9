"""Monthly insight JSON API."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from moodjournal.domains.insights.services import find_insight, insight_service_from_app
from moodjournal.domains.stats import days
from moodjournal.extensions import limiter

insights_api_bp = Blueprint("insights_api", __name__)


@insights_api_bp.get("/monthly")
@jwt_required()
@limiter.limit("20/hour")
def monthly_insight():
    """Stored insight for ``month`` (YYYY-MM), generated on first request."""
    user_id = int(get_jwt_identity())
    service = insight_service_from_app(current_app)
    result = service.get_monthly_insight(user_id, request.args.get("month"), now=days.utcnow())
    return jsonify({"ok": True, **result.as_dict()})


@insights_api_bp.get("/monthly/status")
@jwt_required()
def monthly_insight_status():
    user_id = int(get_jwt_identity())
    month = request.args.get("month") or days.month_key(days.reference_today(current_app.config))
    year, month_num = days.parse_month_key(month)
    month = f"{year:04d}-{month_num:02d}"
    return jsonify({"ok": True, "month": month, "has_insight": find_insight(user_id, month) is not None})
