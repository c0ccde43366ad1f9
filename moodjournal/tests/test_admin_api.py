"""
Admin API tests.

Covers the console endpoints under /api/admin: dashboard counts, user
listing and detail, user updates and deletion, and AI usage reporting.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

pytestmark = pytest.mark.integration

from moodjournal.core.auth.models import utc_timestamp
from moodjournal.domains.insights.models import AIUsage, MonthlyInsight
from moodjournal.domains.insights.services import create_insight
from moodjournal.domains.insights.usage import log_usage
from moodjournal.domains.journal.models import JournalEntry
from moodjournal.domains.journal.services import journal_service

TODAY = date(2024, 1, 5)


def _prime_csrf(client) -> str:
    token = "test-csrf-token"
    with client.session_transaction() as sess:
        sess["_csrf_token"] = token
    return token


def _seed_activity(user_id: int) -> None:
    journal_service.upsert_entry(user_id, date(2024, 1, 3), 4, "ok", ["work"], today=TODAY)
    journal_service.upsert_entry(user_id, date(2024, 1, 4), 2, None, [], today=TODAY)
    create_insight(user_id, "2024-01", "steady", 2, Decimal("3.00"))
    log_usage(provider="chatgpt", endpoint="chatgpt-api8.p.rapidapi.com/", user_id=user_id,
              prompt_tokens=100, response_tokens=50, success=True, response_time_ms=800)
    log_usage(provider="gemini", endpoint="gemini-pro-ai.p.rapidapi.com/", user_id=user_id,
              success=False, error_message="timeout", response_time_ms=30000)


def test_admin_routes_require_admin_role(client, user_with_token):
    assert client.get("/api/admin/dashboard").status_code == 401
    resp = client.get("/api/admin/dashboard", headers=user_with_token["headers"])
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"
    assert client.get("/api/admin/users", headers=user_with_token["headers"]).status_code == 403


def test_dashboard_counts(client, admin_with_token, user_with_token, make_user):
    _seed_activity(user_with_token["user_id"])
    disabled = make_user("disabled@example.com")
    client.patch(
        f"/api/admin/users/{disabled['user_id']}",
        json={"is_active": False},
        headers=admin_with_token["headers"],
    )

    body = client.get("/api/admin/dashboard", headers=admin_with_token["headers"]).get_json()
    overview = body["overview"]
    assert overview["total_users"] == 3
    assert overview["active_users"] == 2
    assert overview["inactive_users"] == 1
    assert overview["total_entries"] == 2
    assert overview["total_insights"] == 1
    assert overview["total_ai_calls"] == 2

    stats = body["ai_usage"]["last_30_days"]
    assert stats["total_calls"] == 2
    assert stats["successful_calls"] == 1
    assert stats["success_rate"] == 50.0
    assert stats["total_tokens"] == 150
    assert len(body["ai_usage"]["recent"]) == 2
    assert len(body["recent_users"]) == 3


def test_list_users_search_and_pagination(client, admin_with_token, make_user):
    for name in ("alice", "bob", "carol"):
        make_user(f"{name}@example.com")
    headers = admin_with_token["headers"]

    page = client.get("/api/admin/users?per_page=2&page=1", headers=headers).get_json()
    assert page["total"] == 4
    assert page["pages"] == 2
    assert len(page["items"]) == 2

    found = client.get("/api/admin/users?search=BOB", headers=headers).get_json()
    assert [u["email"] for u in found["items"]] == ["bob@example.com"]

    assert client.get("/api/admin/users?per_page=500", headers=headers).status_code == 400


def test_user_detail_includes_counts(client, admin_with_token, user_with_token):
    _seed_activity(user_with_token["user_id"])
    resp = client.get(f"/api/admin/users/{user_with_token['user_id']}", headers=admin_with_token["headers"])
    assert resp.status_code == 200
    user = resp.get_json()["user"]
    assert user["email"] == "journal-user@example.com"
    assert user["counts"] == {"entries": 2, "insights": 1, "ai_calls": 2}
    assert user["last_entry_date"] == "2024-01-04"

    missing = client.get("/api/admin/users/9999", headers=admin_with_token["headers"])
    assert missing.status_code == 404


def test_update_user_role_status_and_email(client, admin_with_token, user_with_token, other_user_with_token):
    headers = admin_with_token["headers"]
    url = f"/api/admin/users/{user_with_token['user_id']}"

    promoted = client.patch(url, json={"role": "admin", "full_name": "Renamed"}, headers=headers).get_json()
    assert promoted["user"]["role_codes"] == ["admin", "user"]
    assert promoted["user"]["full_name"] == "Renamed"

    demoted = client.patch(url, json={"role": "user", "is_active": False}, headers=headers).get_json()
    assert demoted["user"]["role_codes"] == ["user"]
    assert demoted["user"]["is_active"] is False

    taken = client.patch(url, json={"email": "other-user@example.com"}, headers=headers)
    assert taken.status_code == 409
    assert taken.get_json()["error"] == "email_already_exists"

    assert client.patch(url, json={"role": "owner"}, headers=headers).status_code == 400
    assert client.patch(url, json={"password": "short"}, headers=headers).status_code == 400


def test_update_requires_csrf_when_enabled(app, client, admin_with_token, user_with_token):
    app.config["CSRF_ENABLED"] = True
    headers = dict(admin_with_token["headers"])
    url = f"/api/admin/users/{user_with_token['user_id']}"
    assert client.patch(url, json={"full_name": "x"}, headers=headers).status_code == 403
    headers["X-CSRF-Token"] = _prime_csrf(client)
    assert client.patch(url, json={"full_name": "x"}, headers=headers).status_code == 200


def test_delete_user_removes_journal_and_keeps_usage(client, admin_with_token, user_with_token):
    uid = user_with_token["user_id"]
    _seed_activity(uid)
    headers = admin_with_token["headers"]

    resp = client.delete(f"/api/admin/users/{uid}", headers=headers)
    assert resp.status_code == 200
    assert JournalEntry.query.filter_by(user_id=uid).count() == 0
    assert MonthlyInsight.query.filter_by(user_id=uid).count() == 0
    usage = AIUsage.query.all()
    assert len(usage) == 2
    assert all(row.user_id is None for row in usage)

    assert client.delete(f"/api/admin/users/{uid}", headers=headers).status_code == 404


def test_admin_cannot_delete_self(client, admin_with_token):
    resp = client.delete(f"/api/admin/users/{admin_with_token['user_id']}", headers=admin_with_token["headers"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "cannot_delete_self"


def test_ai_usage_listing_filters_and_statistics(client, admin_with_token, user_with_token, other_user_with_token):
    _seed_activity(user_with_token["user_id"])
    log_usage(provider="chatgpt", endpoint="chatgpt-api8.p.rapidapi.com/",
              user_id=other_user_with_token["user_id"], total_tokens=10)
    headers = admin_with_token["headers"]

    everything = client.get("/api/admin/ai-usage", headers=headers).get_json()
    assert everything["total"] == 3
    assert everything["per_page"] == 50
    assert everything["statistics"]["total_calls"] == 3
    assert {p["provider"] for p in everything["statistics"]["by_provider"]} == {"chatgpt", "gemini"}

    mine = client.get(f"/api/admin/ai-usage?user_id={user_with_token['user_id']}", headers=headers).get_json()
    assert mine["total"] == 2
    assert mine["statistics"]["failed_calls"] == 1

    gemini = client.get("/api/admin/ai-usage?provider=gemini", headers=headers).get_json()
    assert [row["error_message"] for row in gemini["items"]] == ["timeout"]

    today = utc_timestamp().date()
    in_range = client.get(
        f"/api/admin/ai-usage?start_date={today - timedelta(days=1)}&end_date={today}", headers=headers
    ).get_json()
    assert in_range["total"] == 3
    long_ago = client.get(
        "/api/admin/ai-usage?start_date=2000-01-01&end_date=2000-12-31", headers=headers
    ).get_json()
    assert long_ago["total"] == 0 and long_ago["statistics"]["success_rate"] == 0.0

    paged = client.get("/api/admin/ai-usage?per_page=2&page=2", headers=headers).get_json()
    assert len(paged["items"]) == 1 and paged["pages"] == 2


def test_ai_usage_can_be_logged_manually(client, admin_with_token):
    headers = admin_with_token["headers"]
    resp = client.post(
        "/api/admin/ai-usage",
        json={"provider": "gemini", "endpoint": "manual", "prompt_tokens": 7, "response_tokens": 3},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.get_json()["usage"]["total_tokens"] == 10
    assert client.post("/api/admin/ai-usage", json={"endpoint": "x"}, headers=headers).status_code == 400
