"""Journal JSON API."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from moodjournal.core.utils.decorators import csrf_protected
from moodjournal.core.utils.validation import parse_payload
from moodjournal.domains.journal.mappers import map_entry
from moodjournal.domains.journal.schemas.journal_schemas import (
    DateRangeQuery,
    JournalEntryListFilter,
    JournalEntryUpsert,
)
from moodjournal.domains.journal.services import journal_service
from moodjournal.domains.stats import days

journal_api_bp = Blueprint("journal_api", __name__)


def _today():
    return days.reference_today(current_app.config)


@journal_api_bp.get("")
@jwt_required()
def list_journal():
    user_id = int(get_jwt_identity())
    filters = parse_payload(JournalEntryListFilter, request.args.to_dict())
    entries, total = journal_service.list_entries(
        user_id,
        month=filters.month,
        year=filters.year,
        limit=filters.limit,
        offset=filters.offset,
    )
    return jsonify(
        {
            "ok": True,
            "items": [map_entry(e) for e in entries],
            "total": total,
            "limit": filters.limit,
            "offset": filters.offset,
        }
    )


@journal_api_bp.post("")
@jwt_required()
@csrf_protected
def upsert_journal_entry():
    data = parse_payload(JournalEntryUpsert, request.get_json(silent=True))
    user_id = int(get_jwt_identity())
    today = _today()
    entry, created = journal_service.upsert_entry(
        user_id,
        data.entry_date or today,
        data.mood_score,
        data.note,
        data.tags,
        today=today,
    )
    return jsonify({"ok": True, "created": created, "entry": map_entry(entry)}), (201 if created else 200)


@journal_api_bp.get("/today")
@jwt_required()
def today_entry():
    user_id = int(get_jwt_identity())
    today = _today()
    entry = journal_service.get_entry_for_day(user_id, today)
    return jsonify(
        {
            "ok": True,
            "date": today.isoformat(),
            "has_entry": entry is not None,
            "entry": map_entry(entry) if entry else None,
        }
    )


@journal_api_bp.get("/range")
@jwt_required()
def entries_in_range():
    user_id = int(get_jwt_identity())
    query = parse_payload(DateRangeQuery, request.args.to_dict())
    entries = journal_service.find_entries_in_range(user_id, query.start_date, query.end_date)
    return jsonify(
        {
            "ok": True,
            "start_date": query.start_date.isoformat(),
            "end_date": query.end_date.isoformat(),
            "items": [map_entry(e) for e in entries],
        }
    )


@journal_api_bp.get("/<int:entry_id>")
@jwt_required()
def get_entry(entry_id: int):
    user_id = int(get_jwt_identity())
    entry = journal_service.get_entry(user_id, entry_id)
    if not entry:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "entry": map_entry(entry)})


@journal_api_bp.delete("/<int:entry_id>")
@jwt_required()
@csrf_protected
def delete_journal_entry(entry_id: int):
    user_id = int(get_jwt_identity())
    journal_service.delete_entry(user_id, entry_id, today=_today())
    return jsonify({"ok": True})
