from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import pytest

from moodjournal import create_app
from moodjournal.core.auth.auth_service import issue_access_token
from moodjournal.core.auth.models import ROLE_ADMIN, ROLE_USER
from moodjournal.core.errors import SummarizerUnavailable
from moodjournal.core.users.services import create_user
from moodjournal.domains.stats import days
from moodjournal.extensions import db

# Fixed clock: 2024-01-05 10:00 at UTC+07:00.
FIXED_NOW = datetime(2024, 1, 5, 3, 0, tzinfo=timezone.utc)


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


class FakeSummarizer:
    """Records prompts and returns canned text, or raises when told to."""

    def __init__(self, text: str = "A calm, steady month.", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.prompts: List[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def summarize(self, prompt: str, *, user_id: Optional[int] = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture()
def fixed_clock(monkeypatch):
    monkeypatch.setattr(days, "utcnow", lambda: FIXED_NOW)
    return FIXED_NOW


@pytest.fixture()
def app(tmp_path, fixed_clock):
    """Per-test app bound to its own SQLite file."""
    app = create_app(
        "testing",
        {"SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}"},
    )
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def summarizer(app):
    fake = FakeSummarizer()
    app.extensions["insight_summarizer"] = fake
    return fake


@pytest.fixture()
def failing_summarizer(app):
    fake = FakeSummarizer(error=SummarizerUnavailable("all AI providers failed"))
    app.extensions["insight_summarizer"] = fake
    return fake


def _make_user(email: str, *, admin: bool = False, password: str = "secret123"):
    roles = (ROLE_USER, ROLE_ADMIN) if admin else (ROLE_USER,)
    user = create_user(email, password, full_name=email.split("@")[0], roles=roles)
    return {
        "user": user,
        "user_id": user.id,
        "password": password,
        "headers": {"Authorization": f"Bearer {issue_access_token(user)}"},
    }


@pytest.fixture()
def user_with_token(app):
    return _make_user("journal-user@example.com")


@pytest.fixture()
def other_user_with_token(app):
    return _make_user("other-user@example.com")


@pytest.fixture()
def admin_with_token(app):
    return _make_user("admin@example.com", admin=True)


@pytest.fixture()
def make_user(app):
    return _make_user
