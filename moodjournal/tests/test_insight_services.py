from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest

pytestmark = pytest.mark.integration

from moodjournal.core.errors import Conflict, InvalidInput, SummarizerMalformed, SummarizerUnavailable
from moodjournal.domains.insights import services as insight_services
from moodjournal.domains.insights.models import MonthlyInsight
from moodjournal.domains.insights.prompt import EMPTY_MONTH_MESSAGE, build_monthly_prompt
from moodjournal.domains.insights.services import (
    STATUS_EMPTY,
    STATUS_GENERATED,
    STATUS_STORED,
    MonthlyInsightService,
    create_insight,
    find_insight,
)
from moodjournal.domains.journal.services import journal_service
from moodjournal.domains.stats import days
from moodjournal.domains.stats.aggregates import aggregate

TODAY = date(2024, 1, 5)


def _seed(user_id: int) -> None:
    for day, mood, note, tags in (
        (1, 3, "first day back", ["work"]),
        (2, 4, None, ["gym", "work"]),
        (3, 5, "dinner with family", ["family"]),
    ):
        journal_service.upsert_entry(user_id, date(2024, 1, day), mood, note, tags, today=TODAY)


def _service(app, summarizer) -> MonthlyInsightService:
    return MonthlyInsightService(summarizer, offset=days.offset_from_config(app.config), top_n=5)


def test_generates_once_and_then_serves_stored_text(app, user_with_token, summarizer):
    uid = user_with_token["user_id"]
    _seed(uid)
    service = _service(app, summarizer)

    first = service.get_monthly_insight(uid, "2024-01")
    second = service.get_monthly_insight(uid, "2024-01")

    assert first.status == STATUS_GENERATED
    assert second.status == STATUS_STORED
    assert first.text == second.text == summarizer.text
    assert summarizer.calls == 1
    assert first.total_entries == 3
    assert first.average_mood == Decimal("4.00")
    assert MonthlyInsight.query.filter_by(user_id=uid).count() == 1


def test_empty_month_returns_canned_message_without_persisting(app, user_with_token, summarizer):
    result = _service(app, summarizer).get_monthly_insight(user_with_token["user_id"], "2024-02")
    assert result.status == STATUS_EMPTY
    assert result.text == EMPTY_MONTH_MESSAGE
    assert summarizer.calls == 0
    assert MonthlyInsight.query.count() == 0


def test_summarizer_failure_propagates_and_nothing_is_stored(app, user_with_token, failing_summarizer):
    uid = user_with_token["user_id"]
    _seed(uid)
    with pytest.raises(SummarizerUnavailable) as excinfo:
        _service(app, failing_summarizer).get_monthly_insight(uid, "2024-01")
    assert excinfo.value.retryable is True
    assert find_insight(uid, "2024-01") is None


def test_lost_race_serves_the_winners_text(app, user_with_token, summarizer):
    uid = user_with_token["user_id"]
    _seed(uid)
    real_create = insight_services.create_insight

    def racing_create(user_id, month_key, text, total_entries, avg_mood):
        # A concurrent request stores its insight between our lookup and our insert.
        real_create(user_id, month_key, "winner text", total_entries, avg_mood)
        return real_create(user_id, month_key, text, total_entries, avg_mood)

    with mock.patch.object(insight_services, "create_insight", side_effect=racing_create):
        result = _service(app, summarizer).get_monthly_insight(uid, "2024-01")

    assert result.status == STATUS_STORED
    assert result.text == "winner text"
    assert MonthlyInsight.query.filter_by(user_id=uid).count() == 1


def test_create_insight_raises_conflict_on_duplicate(app, user_with_token):
    uid = user_with_token["user_id"]
    create_insight(uid, "2024-01", "one", 3, Decimal("4.00"))
    with pytest.raises(Conflict):
        create_insight(uid, "2024-01", "two", 3, Decimal("4.00"))
    assert find_insight(uid, "2024-01").content == "one"


def test_month_key_defaults_to_current_month_and_is_validated(app, user_with_token, summarizer):
    service = _service(app, summarizer)
    assert service.get_monthly_insight(user_with_token["user_id"], now=days.utcnow()).month == "2024-01"
    with pytest.raises(InvalidInput):
        service.get_monthly_insight(user_with_token["user_id"], "January")


def test_prompt_carries_stats_and_daily_lines(app, user_with_token):
    uid = user_with_token["user_id"]
    _seed(uid)
    entries = journal_service.find_entries_in_range(uid, date(2024, 1, 1), date(2024, 1, 31))
    prompt = build_monthly_prompt(entries, "2024-01", aggregate(entries, date(2024, 1, 1), date(2024, 1, 31)))

    assert "Days journaled: 3" in prompt
    assert "Average mood: 4.00/5.0" in prompt
    assert "Most common mood: Neutral (1 days)" in prompt
    assert "Frequent tags: work, gym, family" in prompt
    assert '- 2024-01-01: Neutral (3) - "first day back"' in prompt
    assert "- 2024-01-02: Good (4)\n" in prompt
    assert "400 words" in prompt


def test_monthly_insight_api(client, user_with_token, summarizer):
    _seed(user_with_token["user_id"])
    headers = user_with_token["headers"]

    status = client.get("/api/insights/monthly/status?month=2024-01", headers=headers).get_json()
    assert status["has_insight"] is False

    body = client.get("/api/insights/monthly?month=2024-01", headers=headers).get_json()
    assert body["ok"] is True
    assert body["status"] == "generated"
    assert body["insight"] == summarizer.text
    assert body["average_mood"] == 4.0

    again = client.get("/api/insights/monthly?month=2024-01", headers=headers).get_json()
    assert again["status"] == "stored"
    assert summarizer.calls == 1
    assert client.get("/api/insights/monthly/status?month=2024-01", headers=headers).get_json()["has_insight"]


def test_monthly_insight_api_surfaces_retryable_failure(client, user_with_token, failing_summarizer):
    _seed(user_with_token["user_id"])
    resp = client.get("/api/insights/monthly?month=2024-01", headers=user_with_token["headers"])
    assert resp.status_code == 503
    body = resp.get_json()
    assert body == {
        "ok": False,
        "error": "ai_unavailable",
        "message": "all AI providers failed",
        "retryable": True,
    }


def test_malformed_reply_maps_to_502(app, client, user_with_token, summarizer):
    _seed(user_with_token["user_id"])
    summarizer.error = SummarizerMalformed("no text")
    resp = client.get("/api/insights/monthly?month=2024-01", headers=user_with_token["headers"])
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "ai_malformed_reply"
