"""Scheduler hook for the monthly insight batch."""

from __future__ import annotations

import hmac

from flask import Blueprint, current_app, jsonify, request

from moodjournal.domains.insights.tasks import generate_monthly_insights

cron_api_bp = Blueprint("cron_api", __name__)


def _authorized() -> bool:
    secret = current_app.config.get("CRON_SECRET") or ""
    if not secret:
        return True
    header = request.headers.get("Authorization") or ""
    return hmac.compare_digest(header, f"Bearer {secret}")


@cron_api_bp.route("/generate-insights", methods=["GET", "POST"])
def generate_insights():
    if not _authorized():
        return jsonify({"ok": False, "error": "unauthorized"}), 401
    report = generate_monthly_insights(request.args.get("month"))
    return jsonify({"ok": True, **report.as_dict()})
