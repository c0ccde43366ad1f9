"""Admin console JSON API (admin role required)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity

from moodjournal.core.admin import services as admin_service
from moodjournal.core.admin.schemas import AIUsageCreate, AIUsageQuery, UserListQuery
from moodjournal.core.users import services as user_service
from moodjournal.core.users.schemas import AdminUserUpdateRequest, serialize_user
from moodjournal.core.utils.decorators import csrf_protected, require_roles
from moodjournal.core.utils.pagination import paginate
from moodjournal.core.utils.validation import parse_payload
from moodjournal.domains.insights.models import AIUsage
from moodjournal.domains.insights.usage import (
    filtered_usage_query,
    log_usage,
    serialize_usage,
    usage_statistics,
)

admin_api_bp = Blueprint("admin_api", __name__)


@admin_api_bp.get("/dashboard")
@require_roles({"admin"})
def dashboard():
    return jsonify({"ok": True, **admin_service.dashboard()})


@admin_api_bp.get("/users")
@require_roles({"admin"})
def list_users():
    query = parse_payload(UserListQuery, request.args.to_dict())
    return jsonify({"ok": True, **admin_service.list_users(query.search, query.page, query.per_page)})


@admin_api_bp.get("/users/<int:user_id>")
@require_roles({"admin"})
def get_user(user_id: int):
    user = user_service.get_user_or_404(user_id)
    return jsonify({"ok": True, "user": admin_service.user_detail(user)})


@admin_api_bp.patch("/users/<int:user_id>")
@require_roles({"admin"})
@csrf_protected
def update_user(user_id: int):
    data = parse_payload(AdminUserUpdateRequest, request.get_json(silent=True))
    user = user_service.update_user(user_service.get_user_or_404(user_id), data)
    return jsonify({"ok": True, "user": serialize_user(user)})


@admin_api_bp.delete("/users/<int:user_id>")
@require_roles({"admin"})
@csrf_protected
def delete_user(user_id: int):
    user = user_service.get_user_or_404(user_id)
    user_service.delete_user(user, acting_user_id=int(get_jwt_identity()))
    return jsonify({"ok": True})


@admin_api_bp.get("/ai-usage")
@require_roles({"admin"})
def ai_usage():
    query = parse_payload(AIUsageQuery, request.args.to_dict())
    filtered = filtered_usage_query(
        user_id=query.user_id,
        provider=query.provider,
        start=query.start_date,
        end=query.end_date,
    )
    page = paginate(filtered.order_by(AIUsage.created_at.desc(), AIUsage.id.desc()), query.page, query.per_page)
    return jsonify(
        {
            "ok": True,
            "items": [serialize_usage(row) for row in page["items"]],
            "page": page["page"],
            "per_page": page["per_page"],
            "total": page["total"],
            "pages": page["pages"],
            "statistics": usage_statistics(filtered),
        }
    )


@admin_api_bp.post("/ai-usage")
@require_roles({"admin"})
@csrf_protected
def create_ai_usage():
    data = parse_payload(AIUsageCreate, request.get_json(silent=True))
    row = log_usage(**data.model_dump())
    return jsonify({"ok": True, "usage": serialize_usage(row)}), 201
