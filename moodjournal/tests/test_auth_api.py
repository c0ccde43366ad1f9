"""Auth API tests: register, login, /me, change-password, token checks."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

from moodjournal.core.users.models import User
from moodjournal.extensions import db


def _register(client, email="new@example.com", password="abc12345", **extra):
    return client.post("/auth/register", json={"email": email, "password": password, **extra})


def _login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})


def test_register_returns_token_and_user(client):
    resp = _register(client, email="  New@Example.com ", full_name="New Person")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["ok"] is True
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["role_codes"] == ["user"]
    assert body["access_token"] and body["csrf_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.get_json()["user"]["full_name"] == "New Person"


def test_register_rejects_duplicate_email(client):
    assert _register(client).status_code == 201
    resp = _register(client, email="NEW@example.com")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "email_already_exists"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": "abc12345"},
        {"email": "weak@example.com", "password": "password"},
        {"email": "short@example.com", "password": "a1"},
        {"email": "missing@example.com"},
    ],
)
def test_register_validation(client, payload):
    resp = client.post("/auth/register", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"


def test_login_success_and_failure(client, user_with_token):
    ok = _login(client, "Journal-User@example.com", user_with_token["password"])
    assert ok.status_code == 200
    assert ok.get_json()["user"]["id"] == user_with_token["user_id"]

    bad = _login(client, "journal-user@example.com", "wrong-pass1")
    assert bad.status_code == 401
    assert bad.get_json() == {"ok": False, "error": "invalid_credentials"}
    assert _login(client, "nobody@example.com", "whatever1").status_code == 401


def test_login_rejects_disabled_account(client, user_with_token):
    user = user_with_token["user"]
    user.is_active = False
    db.session.commit()
    resp = _login(client, "journal-user@example.com", user_with_token["password"])
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "account_disabled"


def test_me_requires_token(client):
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.get_json()["ok"] is False
    bad = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401


def test_token_stops_working_when_user_disabled_or_deleted(client, user_with_token):
    headers = user_with_token["headers"]
    assert client.get("/auth/me", headers=headers).status_code == 200

    user = db.session.get(User, user_with_token["user_id"])
    user.is_active = False
    db.session.commit()
    assert client.get("/auth/me", headers=headers).status_code == 401

    db.session.delete(user)
    db.session.commit()
    assert client.get("/api/entries", headers=headers).status_code == 401


def test_change_password(client, user_with_token):
    headers = user_with_token["headers"]
    wrong = client.post(
        "/auth/change-password",
        json={"current_password": "nope12345", "new_password": "fresh12345"},
        headers=headers,
    )
    assert wrong.status_code == 400
    assert wrong.get_json()["error"] == "invalid_current_password"

    weak = client.post(
        "/auth/change-password",
        json={"current_password": user_with_token["password"], "new_password": "onlyletters"},
        headers=headers,
    )
    assert weak.status_code == 400

    ok = client.post(
        "/auth/change-password",
        json={"current_password": user_with_token["password"], "new_password": "fresh12345"},
        headers=headers,
    )
    assert ok.status_code == 200
    assert _login(client, "journal-user@example.com", "fresh12345").status_code == 200
    assert _login(client, "journal-user@example.com", user_with_token["password"]).status_code == 401


def test_seed_admin_promotes_existing_account(client, user_with_token):
    from moodjournal.core.auth.auth_service import issue_access_token
    from moodjournal.scripts.seed_admin import seed_admin_user, seed_roles

    seed_roles()
    user = seed_admin_user("journal-user@example.com", "ignored123")
    assert user.id == user_with_token["user_id"]
    assert user.role_codes == ["admin", "user"]

    headers = {"Authorization": f"Bearer {issue_access_token(user)}"}
    assert client.get("/api/admin/dashboard", headers=headers).status_code == 200
    assert _login(client, "journal-user@example.com", user_with_token["password"]).status_code == 200
