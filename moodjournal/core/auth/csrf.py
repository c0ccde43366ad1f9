"""Session-bound CSRF tokens for state-changing JSON calls."""

from __future__ import annotations

import hmac
import secrets

from flask import session

CSRF_TOKEN_SESSION_KEY = "_csrf_token"
CSRF_HEADER = "X-CSRF-Token"


def generate_csrf_token() -> str:
    """Return the session's token, minting one on first use."""
    token = session.get(CSRF_TOKEN_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        session[CSRF_TOKEN_SESSION_KEY] = token
    return token


def validate_csrf_token(token: str) -> bool:
    expected = session.get(CSRF_TOKEN_SESSION_KEY) or ""
    if not token or not expected:
        return False
    return hmac.compare_digest(token, expected)
