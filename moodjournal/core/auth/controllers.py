"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request, session
from flask_jwt_extended import current_user, jwt_required

from moodjournal.core.auth.auth_service import (
    authenticate_user,
    change_password,
    issue_access_token,
    register_user,
)
from moodjournal.core.auth.csrf import generate_csrf_token
from moodjournal.core.auth.schemas import ChangePasswordRequest, RegisterRequest
from moodjournal.core.users.schemas import LoginRequest, serialize_user
from moodjournal.core.utils.decorators import csrf_protected
from moodjournal.core.utils.validation import parse_payload
from moodjournal.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)


@auth_bp.post("/register")
@limiter.limit("5/minute")
def register():
    data = parse_payload(RegisterRequest, request.get_json(silent=True))
    user = register_user(data)
    return (
        jsonify(
            {
                "ok": True,
                "user": serialize_user(user),
                "access_token": issue_access_token(user),
                "csrf_token": generate_csrf_token(),
            }
        ),
        201,
    )


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    # Login is stateless even if a stale session cookie is present.
    session.clear()
    data = parse_payload(LoginRequest, request.get_json(silent=True))
    user = authenticate_user(data.email, data.password)
    if not user:
        return jsonify({"ok": False, "error": "invalid_credentials"}), 401
    return jsonify(
        {
            "ok": True,
            "access_token": issue_access_token(user),
            "csrf_token": generate_csrf_token(),
            "user": serialize_user(user),
        }
    )


@auth_bp.get("/me")
@jwt_required()
def me():
    return jsonify({"ok": True, "user": serialize_user(current_user)})


@auth_bp.post("/change-password")
@jwt_required()
@csrf_protected
@limiter.limit("5/minute")
def change_password_route():
    data = parse_payload(ChangePasswordRequest, request.get_json(silent=True))
    change_password(current_user, data)
    return jsonify({"ok": True})
